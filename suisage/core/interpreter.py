"""
Turns a user query into a validated Plan with exactly one LLM call.

The model is asked for bare JSON but often wraps it in prose or a fenced
block, so parsing falls back in order: the whole text, the first fenced
block, then the first balanced top-level object. Only a JSON
object ends the search.
"""

import json
import logging
import re
from typing import Any, Iterator, Optional

from pydantic import ValidationError

from ..providers.llm.base import LLMProvider
from .errors import MalformedPlan
from .models import Plan
from .prompt import build_prompt
from .symbols import SymbolResolver
from .tools import ToolRegistry

_FENCED_BLOCK_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)

_NOT_FOUND = object()


def _try_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return _NOT_FOUND


def _first_balanced_object(text: str) -> Optional[str]:
    """Return the first top-level ``{...}`` span, ignoring braces inside strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def _candidates(stripped: str) -> Iterator[str]:
    yield stripped
    for match in _FENCED_BLOCK_RE.finditer(stripped):
        yield match.group(1).strip()
    balanced = _first_balanced_object(stripped)
    if balanced is not None:
        yield balanced


def extract_json(text: str) -> Any:
    """Parse the model's reply, raising MalformedPlan if no JSON can be found.

    The first candidate that parses to an object wins. A reply whose only JSON
    is something else (a list, a quoted string) returns that value so the
    caller can report what it got.
    """
    if not text or not text.strip():
        raise MalformedPlan("The model returned an empty response")

    fallback: Any = _NOT_FOUND
    for candidate in _candidates(text.strip()):
        parsed = _try_json(candidate)
        if isinstance(parsed, dict):
            return parsed
        if fallback is _NOT_FOUND:
            fallback = parsed

    if fallback is _NOT_FOUND:
        raise MalformedPlan("Could not find a JSON plan in the model response")
    return fallback


def parse_plan(text: str) -> Plan:
    data = extract_json(text)
    if not isinstance(data, dict):
        raise MalformedPlan(f"Expected a JSON object, got {type(data).__name__}")
    if data.get("status") is None:
        raise MalformedPlan("Plan is missing a status")
    try:
        return Plan.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ())) or "plan"
        raise MalformedPlan(f"Invalid plan at {location}: {first.get('msg', 'validation failed')}") from exc


class PlanInterpreter:
    """Builds the prompt, calls the LLM once and parses the reply into a Plan."""

    def __init__(
        self,
        llm: LLMProvider,
        registry: ToolRegistry,
        symbols: SymbolResolver,
        logger: Optional[logging.Logger] = None,
    ):
        self.llm = llm
        self.registry = registry
        self.symbols = symbols
        self.logger = logger or logging.getLogger(__name__)

    async def interpret(self, query: str) -> Plan:
        """Raises LLMProviderError on transport failure and MalformedPlan on bad output."""
        prompt = build_prompt(query, self.registry, self.symbols)
        text = await self.llm.complete(prompt)
        try:
            plan = parse_plan(text)
        except MalformedPlan:
            self.logger.warning(f"Unparseable plan from model: {text[:200]!r}")
            raise
        self.logger.info(f"Plan status={plan.status.value} actions={len(plan.actions)}")
        return plan
