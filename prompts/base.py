"""Prompt loading utilities for Tellr AI features."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from string import Template

__all__ = ["PromptTemplate", "load_prompt", "render_prompt"]


@dataclass(frozen=True)
class PromptTemplate:
    """Represents a prompt template with the resolved text content."""

    name: str
    content: str

    def render(self, **context: object) -> str:
        """Substitute ``$placeholders``; JSON braces in the template are left alone."""

        return Template(self.content).substitute({key: str(value) for key, value in context.items()})


PROMPTS_DIR = Path(__file__).resolve().parent


@lru_cache(maxsize=32)
def load_prompt(name: str) -> PromptTemplate:
    """Load a prompt template by stem name (without extension)."""

    path = PROMPTS_DIR / f"{name}.txt"
    if not path.exists():
        raise FileNotFoundError(f"Prompt template not found: {path}")

    content = path.read_text(encoding="utf-8").strip()
    return PromptTemplate(name=name, content=content)


def render_prompt(name: str, **context: object) -> str:
    return load_prompt(name).render(**context)
