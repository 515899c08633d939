"""
Name: Prompt Builder

Responsibilities:
  - Assemble instruction + retrieved documents + query into one prompt
  - Cap each document at max_context_chars characters
  - Escape delimiters in documents and the query to prevent prompt injection

Collaborators:
  - domain.entities.RetrievalResult: ordered context documents
  - infrastructure.prompts: supplies the instruction text

Constraints:
  - Pure function: identical inputs always produce an identical prompt
  - No I/O, no logging, no clock

Notes:
  - Truncation happens before escaping; escaping only ever shortens text,
    so no document contributes more than max_context_chars characters
  - With an empty retrieval the prompt is instruction + query only
"""

from ..domain.entities import RetrievalResult, ScoredDocument

# R: Delimiters that separate documents (hard to inject)
DOCUMENT_DELIMITER = "---[DOCUMENT {index} | id: {document_id}]---"
DOCUMENT_END = "---[END DOCUMENT]---"
CONTEXT_HEADER = "Context:"
QUESTION_HEADER = "Question:"


def _escape_delimiters(text: str) -> str:
    """
    R: Escape potential injection delimiters in text.

    Replaces patterns that could break document boundaries.
    """
    text = text.replace("---[", "—[")
    text = text.replace("]---", "]—")
    return text


def truncate_text(text: str, max_chars: int) -> str:
    """R: Hard prefix cut at max_chars characters."""
    if max_chars <= 0:
        raise ValueError("max_chars must be greater than 0")
    return text[:max_chars]


def _format_document(item: ScoredDocument, index: int, max_chars: int) -> str:
    header = DOCUMENT_DELIMITER.format(
        index=index,
        document_id=_escape_delimiters(item.document_id),
    )
    body = _escape_delimiters(truncate_text(item.document.text, max_chars))
    return f"{header}\n{body}\n{DOCUMENT_END}"


def build_prompt(
    query_text: str,
    retrieval: RetrievalResult,
    *,
    instruction: str,
    max_context_chars: int,
) -> str:
    """
    R: Build the generation prompt.

    Layout:
        <instruction>

        Context:
        ---[DOCUMENT 1 | id: ...]---
        <text, truncated>
        ---[END DOCUMENT]---
        ...

        Question: <query>

    Args:
        query_text: Original query text
        retrieval: Ordered retrieval result (may be empty)
        instruction: Fixed instruction text
        max_context_chars: Per-document character cap

    Returns:
        Prompt string
    """
    sections = [instruction.strip()]

    if len(retrieval):
        documents = [
            _format_document(item, index, max_context_chars)
            for index, item in enumerate(retrieval, start=1)
        ]
        sections.append(CONTEXT_HEADER + "\n" + "\n".join(documents))

    sections.append(f"{QUESTION_HEADER} {_escape_delimiters(query_text)}")
    return "\n\n".join(sections)
