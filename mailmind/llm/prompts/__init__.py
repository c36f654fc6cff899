"""
Prompt templates, loaded from the .txt files next to this module.

Templates use str.format placeholders; literal braces in them are doubled.
"""

from __future__ import annotations

from pathlib import Path

PROMPTS_DIR = Path(__file__).parent


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self, prompts_dir: Path = PROMPTS_DIR):
        self.prompts_dir = prompts_dir
        self._cache: dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        """Raw template for `prompt_name` (file name without .txt)."""
        if prompt_name not in self._cache:
            prompt_path = self.prompts_dir / f"{prompt_name}.txt"
            if not prompt_path.exists():
                raise FileNotFoundError(f"Prompt file not found: {prompt_path}")
            self._cache[prompt_name] = prompt_path.read_text(encoding="utf-8")
        return self._cache[prompt_name]

    def get_cv_extraction_system_prompt(self) -> str:
        return self.load_prompt("cv_extraction_system")

    def get_cv_extraction_prompt(self, **kwargs: object) -> str:
        """
        Args:
            file_name: Attachment name
            subject: Email subject
            email_body: Email body (sanitized)
            cv_text: Text extracted from the attachment (sanitized)
        """
        return self.load_prompt("cv_extraction_prompt").format(**kwargs)

    def reload(self) -> None:
        """Clear cache and reload prompts from disk"""
        self._cache.clear()


_loader = PromptLoader()


def get_cv_extraction_system_prompt() -> str:
    return _loader.get_cv_extraction_system_prompt()


def get_cv_extraction_prompt(**kwargs: object) -> str:
    return _loader.get_cv_extraction_prompt(**kwargs)


def reload_prompts() -> None:
    _loader.reload()
