"""
Name: Prompt Loader

Responsibilities:
  - Load the instruction template from ragline/prompts
  - Support versioning via PROMPT_VERSION env var
  - Cache the loaded template

Collaborators:
  - config: prompt_version setting
  - prompts/*.md: Template files

Notes:
  - Files are named {version}_instruction.md
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from ...logger import logger

# R: Directory containing prompt templates
PROMPTS_DIR = Path(__file__).parent.parent.parent / "prompts"


class PromptLoader:
    """
    R: Load and cache the instruction template by version.
    """

    def __init__(self, version: str = "v1", prompts_dir: Path = PROMPTS_DIR):
        self.version = version
        self.prompts_dir = prompts_dir
        self._template: Optional[str] = None

    def get_template(self) -> str:
        """
        R: Get instruction text, loading from file if needed.

        Raises:
            FileNotFoundError: If template file doesn't exist
        """
        if self._template is None:
            self._template = self._load_template()
        return self._template

    def _load_template(self) -> str:
        filepath = self.prompts_dir / f"{self.version}_instruction.md"

        if not filepath.exists():
            logger.error(
                f"Prompt template not found: {filepath}",
                extra={"version": self.version},
            )
            raise FileNotFoundError(f"Prompt template not found: {filepath}")

        template = filepath.read_text(encoding="utf-8")
        logger.info(
            "Loaded prompt template",
            extra={"version": self.version, "chars": len(template)},
        )
        return template


@lru_cache
def get_prompt_loader() -> PromptLoader:
    """
    R: Get singleton PromptLoader with configured version.
    """
    from ...config import get_settings

    return PromptLoader(version=get_settings().prompt_version)
