"""Plan models produced by the interpreter.

Plan and Action mirror the JSON contract the model is asked to follow. They
are validated with pydantic, so anything structurally wrong surfaces as a
``ValidationError`` that the interpreter turns into ``MalformedPlan``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class PlanStatus(str, Enum):
    SUCCESS = "success"
    NEEDS_INFO = "needs_info"
    ERROR = "error"


# Older prompt variants asked for "requires_info".
_STATUS_ALIASES = {
    "requires_info": PlanStatus.NEEDS_INFO.value,
    "needs-info": PlanStatus.NEEDS_INFO.value,
}


class QueryState(str, Enum):
    """Lifecycle of a single query. Terminal states are never left."""

    RECEIVED = "received"
    INTERPRETING = "interpreting"
    EXECUTING = "executing"
    RENDERING = "rendering"
    NEEDS_INFO = "needs_info"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


class Action(BaseModel):
    """One proposed tool invocation. Untrusted until the executor validates it."""

    model_config = ConfigDict(extra="ignore")

    tool: str = Field(min_length=1)
    input: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("input", "inputs", "arguments"),
    )

    @field_validator("input", mode="before")
    @classmethod
    def _none_input(cls, value: Any) -> Any:
        return {} if value is None else value


class Plan(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: PlanStatus
    reasoning: str = ""
    actions: List[Action] = Field(default_factory=list)
    answer_template: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("answer_template", "final_answer", "answerTemplate"),
    )
    request: Optional[str] = None
    error_message: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("error_message", "errorMessage", "error"),
    )

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _STATUS_ALIASES.get(lowered, lowered)
        return value

    @field_validator("reasoning", mode="before")
    @classmethod
    def _none_reasoning(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("actions", mode="before")
    @classmethod
    def _none_actions(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("answer_template", "request", "error_message", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @model_validator(mode="after")
    def _drop_actions_unless_success(self) -> "Plan":
        if self.status != PlanStatus.SUCCESS and self.actions:
            self.actions = []
        return self
