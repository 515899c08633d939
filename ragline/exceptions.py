"""
Name: Error Taxonomy

Responsibilities:
  - Define the error kinds the pipeline surfaces to callers
  - Generate unique error IDs for log correlation
  - Carry HTTP mapping hints for the API layer

Collaborators:
  - application.pipeline: raises these after the bounded retry
  - exception_handlers.py: converts them to RFC 7807 responses

Constraints:
  - Collaborator failures always surface as one of these kinds
  - Timeouts subclass both their stage error and CollaboratorTimeoutError,
    so `except EmbeddingUnavailableError` also catches embedding timeouts

Notes:
  - error_id is UUID for log correlation
"""

from uuid import uuid4


class RAGError(Exception):
    """Base exception for the answer pipeline."""

    error_code: str = "RAG_ERROR"
    status_code: int = 500

    def __init__(self, message: str, error_id: str | None = None):
        self.message = message
        self.error_id = error_id or str(uuid4())
        super().__init__(message)


class InvalidInputError(RAGError):
    """Caller supplied empty or oversized text."""

    error_code: str = "INVALID_INPUT"
    status_code: int = 422


class DocumentNotFoundError(RAGError):
    """Requested document id is not in the store."""

    error_code: str = "NOT_FOUND"
    status_code: int = 404


class EmbeddingUnavailableError(RAGError):
    """Embedding collaborator failed or returned a malformed vector."""

    error_code: str = "EMBEDDING_UNAVAILABLE"
    status_code: int = 503


class RetrievalUnavailableError(RAGError):
    """Vector store search failed."""

    error_code: str = "RETRIEVAL_UNAVAILABLE"
    status_code: int = 503


class GenerationUnavailableError(RAGError):
    """Generation collaborator failed or produced no text."""

    error_code: str = "GENERATION_UNAVAILABLE"
    status_code: int = 503


class StoreUnavailableError(RAGError):
    """Vector store write/delete failed."""

    error_code: str = "STORE_UNAVAILABLE"
    status_code: int = 503


class CollaboratorTimeoutError(RAGError):
    """A collaborator call exceeded its timeout (after the allowed retry)."""

    error_code: str = "TIMEOUT"
    status_code: int = 504


class EmbeddingTimeoutError(EmbeddingUnavailableError, CollaboratorTimeoutError):
    error_code: str = "TIMEOUT"
    status_code: int = 504


class RetrievalTimeoutError(RetrievalUnavailableError, CollaboratorTimeoutError):
    error_code: str = "TIMEOUT"
    status_code: int = 504


class GenerationTimeoutError(GenerationUnavailableError, CollaboratorTimeoutError):
    error_code: str = "TIMEOUT"
    status_code: int = 504


class StoreTimeoutError(StoreUnavailableError, CollaboratorTimeoutError):
    error_code: str = "TIMEOUT"
    status_code: int = 504


# R: Stage error -> matching timeout subclass
TIMEOUT_ERRORS: dict[type[RAGError], type[RAGError]] = {
    EmbeddingUnavailableError: EmbeddingTimeoutError,
    RetrievalUnavailableError: RetrievalTimeoutError,
    GenerationUnavailableError: GenerationTimeoutError,
    StoreUnavailableError: StoreTimeoutError,
}
