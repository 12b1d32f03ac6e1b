"""
Generation — chat-model adapters, prompts, and the query pipeline.

Public API
----------
- :class:`QueryPipeline` — question → cited :class:`~helpdesk_rag.retrieval.models.Answer`.
- :class:`HuggingFaceChat`, :class:`LangChainChat` — generation adapters.
"""

from helpdesk_rag.generation.answerer import QueryPipeline, QueryStage
from helpdesk_rag.generation.llm import HuggingFaceChat, LangChainChat

__all__ = ["HuggingFaceChat", "LangChainChat", "QueryPipeline", "QueryStage"]
