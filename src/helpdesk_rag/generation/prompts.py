"""Prompt templates for cited question answering.

Keeping prompts in one place makes them easy to audit and version.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from helpdesk_rag.retrieval.models import QueryMatch

NO_ANSWER = "I don't know based on the current documents."

SYSTEM_PROMPT = (
    "You are a concise enterprise policy assistant. Use ONLY the CONTEXT to answer. "
    f"If the answer can't be found, reply '{NO_ANSWER}'"
)


def format_context_line(match: QueryMatch) -> str:
    """Render one match as ``[title, pN] snippet``."""
    return f"[{match.title}, p{match.page}] {match.snippet}"


def build_context(matches: list[QueryMatch]) -> str:
    return "\n".join(format_context_line(m) for m in matches)


def build_user_prompt(question: str, context: str) -> str:
    """Question first, then the retrieved context, then the citation instruction."""
    return (
        "QUESTION:\n"
        f"{question}\n\n"
        "CONTEXT:\n"
        f"{context}\n\n"
        "Answer briefly and cite pages inline like (DocTitle, pX):"
    )
