from . import health, llm, query

__all__ = ["health", "llm", "query"]
