"""Instruction prompts sent alongside each transcript."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Optional

from .errors import FilesystemError

DEFAULT_PROMPT_RESOURCE = "rewrite_markdown.md"


def default_system_prompt() -> str:
    return (
        resources.files(__package__)
        .joinpath("assets", DEFAULT_PROMPT_RESOURCE)
        .read_text(encoding="utf-8")
    )


def load_system_prompt(path: Optional[Path] = None) -> str:
    """Return the prompt stored at ``path`` or the bundled markdown rewrite prompt."""
    if path is None:
        return default_system_prompt()
    prompt_path = Path(path).expanduser()
    try:
        text = prompt_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FilesystemError(f"Failed to read prompt file {prompt_path}: {exc}", path=prompt_path) from exc
    if not text.strip():
        raise ValueError(f"Prompt file is empty: {prompt_path}")
    return text
