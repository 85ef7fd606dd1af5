"""
Validates and runs the actions of a plan against the tool registry.

Actions run strictly one after another, in plan order. The first failure
aborts the remaining actions and discards any results already collected.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from ..types import ActionResult
from .errors import InvalidParameter, MissingParameter, ToolExecutionFailure
from .models import Action
from .symbols import SymbolResolver
from .tools import ParameterSpec, ParameterType, RegisteredTool, ToolRegistry

_TRUE_STRINGS = {"true", "yes", "1"}
_FALSE_STRINGS = {"false", "no", "0"}


def to_plain(value: Any) -> Any:
    """Convert provider output into a JSON-like tree with camelCase keys."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, Mapping):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


def coerce_value(tool: str, spec: ParameterSpec, value: Any) -> Any:
    """Coerce one argument to its declared type or raise InvalidParameter."""
    kind = spec.type

    if kind == ParameterType.ARRAY:
        if isinstance(value, (list, tuple)):
            coerced: Any = list(value)
        elif isinstance(value, Mapping):
            raise InvalidParameter(tool, spec.name, "expected a list, got an object")
        else:
            coerced = [value]

    elif kind == ParameterType.BOOLEAN:
        if isinstance(value, bool):
            coerced = value
        elif isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS:
            coerced = True
        elif isinstance(value, str) and value.strip().lower() in _FALSE_STRINGS:
            coerced = False
        elif isinstance(value, int) and value in (0, 1):
            coerced = bool(value)
        else:
            raise InvalidParameter(tool, spec.name, f"expected a boolean, got {value!r}")

    elif kind in (ParameterType.NUMBER, ParameterType.INTEGER):
        if isinstance(value, bool):
            raise InvalidParameter(tool, spec.name, f"expected a number, got {value!r}")
        number: Any = value
        if isinstance(value, str):
            text = value.strip().replace("_", "").replace(",", "")
            try:
                number = int(text)
            except ValueError:
                try:
                    number = float(text)
                except ValueError:
                    raise InvalidParameter(tool, spec.name, f"expected a number, got {value!r}")
        if not isinstance(number, (int, float)):
            raise InvalidParameter(tool, spec.name, f"expected a number, got {value!r}")
        if kind == ParameterType.INTEGER:
            if isinstance(number, float):
                if not number.is_integer():
                    raise InvalidParameter(tool, spec.name, f"expected an integer, got {value!r}")
                number = int(number)
        coerced = number

    else:
        if isinstance(value, str):
            coerced = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            coerced = str(value)
        else:
            raise InvalidParameter(tool, spec.name, f"expected a string, got {type(value).__name__}")

    if spec.enum and isinstance(coerced, str):
        matches = [option for option in spec.enum if option.lower() == coerced.lower()]
        if not matches:
            allowed = ", ".join(spec.enum)
            raise InvalidParameter(tool, spec.name, f"must be one of {allowed}, got {coerced!r}")
        coerced = matches[0]

    return coerced


class ActionExecutor:
    """Runs validated actions against the registry, in order."""

    def __init__(
        self,
        registry: ToolRegistry,
        symbols: SymbolResolver,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.symbols = symbols
        self.logger = logger or logging.getLogger(__name__)

    def prepare_arguments(self, tool: RegisteredTool, raw_input: Mapping[str, Any]) -> Dict[str, Any]:
        """Resolve, check and coerce the inputs of one action.

        Returns the arguments keyed by parameter name, in declaration order.
        Input keys the tool does not declare are ignored.
        """
        name = tool.name
        arguments: Dict[str, Any] = {}

        for spec in tool.definition.parameters:
            value = raw_input.get(spec.name)

            if value is not None and spec.is_asset_reference:
                if isinstance(value, (list, tuple)):
                    value = [self.symbols.resolve(item) for item in value]
                else:
                    value = self.symbols.resolve(value)

            if value is None:
                if spec.has_default:
                    value = spec.default
                elif spec.required:
                    raise MissingParameter(name, spec.name)
                else:
                    continue

            arguments[spec.name] = coerce_value(name, spec, value)

        ignored = set(raw_input) - {p.name for p in tool.definition.parameters}
        if ignored:
            self.logger.debug(f"Ignoring undeclared inputs for {name}: {sorted(ignored)}")

        return arguments

    async def execute_one(self, action: Action) -> ActionResult:
        tool = self.registry.lookup(action.tool)
        arguments = self.prepare_arguments(tool, action.input)
        positional = [arguments.get(p.name) for p in tool.definition.parameters]

        self.logger.info(f"Dispatching tool {tool.name}")
        try:
            output = await tool.implementation(*positional)
        except Exception as exc:
            self.logger.warning(f"Tool {tool.name} failed: {exc}")
            raise ToolExecutionFailure(tool.name, exc) from exc

        return ActionResult(tool=tool.name, input=arguments, output=to_plain(output))

    async def execute(self, actions: Sequence[Action]) -> List[ActionResult]:
        """Run every action in order. Any failure aborts the whole batch."""
        results: List[ActionResult] = []
        for index, action in enumerate(actions):
            self.logger.debug(f"Executing action {index + 1}/{len(actions)}: {action.tool}")
            results.append(await self.execute_one(action))
        return results
