from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class QueryStatus(str, Enum):
    SUCCESS = "success"
    NEEDS_INFO = "needs_info"
    ERROR = "error"


class ActionResult(BaseModel):
    """Output of one executed action, in plan order."""

    model_config = ConfigDict(frozen=True)

    tool: str = Field(description="Name of the executed tool")
    input: Dict[str, Any] = Field(default_factory=dict, description="Resolved arguments, in parameter order")
    output: Any = Field(default=None, description="Tool output as a plain JSON-like tree")


class QueryResponse(BaseModel):
    """The only externally observable artifact of a query. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    status: QueryStatus = Field(description="Terminal outcome of the query")
    reasoning: Optional[str] = Field(default=None, description="Model's explanation of its plan")
    results: List[ActionResult] = Field(default_factory=list, description="One entry per executed action")
    final_answer: Optional[str] = Field(default=None, description="Rendered answer text")
    request: Optional[str] = Field(default=None, description="Follow-up question when more information is needed")
    error: Optional[str] = Field(default=None, description="Human-readable error message")

    @classmethod
    def success(
        cls,
        final_answer: str,
        results: Optional[List[ActionResult]] = None,
        reasoning: Optional[str] = None,
    ) -> "QueryResponse":
        return cls(
            status=QueryStatus.SUCCESS,
            reasoning=reasoning or "",
            results=list(results or []),
            final_answer=final_answer,
        )

    @classmethod
    def needs_info(cls, request: str) -> "QueryResponse":
        return cls(status=QueryStatus.NEEDS_INFO, request=request)

    @classmethod
    def failure(cls, message: str) -> "QueryResponse":
        return cls(status=QueryStatus.ERROR, error=message)

    def to_payload(self) -> Dict[str, Any]:
        """Status-keyed wire representation."""
        if self.status == QueryStatus.SUCCESS:
            return {
                "status": self.status.value,
                "reasoning": self.reasoning or "",
                "results": [result.model_dump(mode="json") for result in self.results],
                "final_answer": self.final_answer or "",
            }
        if self.status == QueryStatus.NEEDS_INFO:
            return {"status": self.status.value, "request": self.request or ""}
        return {"status": self.status.value, "error": self.error or "Unknown error occurred"}
