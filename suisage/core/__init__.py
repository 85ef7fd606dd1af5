from .agent import QueryLifecycle, SuiSageAgent
from .errors import (
    InvalidParameter,
    MalformedPlan,
    MissingParameter,
    RenderingDegraded,
    SuiSageError,
    ToolExecutionFailure,
    UnknownSymbol,
    UnknownTool,
)
from .executor import ActionExecutor
from .interpreter import PlanInterpreter, parse_plan
from .models import Action, Plan, PlanStatus, QueryState
from .renderer import ResponseRenderer
from ..coin_types import normalize_coin_type
from .symbols import SymbolResolver
from .tools import (
    OutputSpec,
    ParameterSpec,
    ParameterType,
    RegisteredTool,
    ResultShape,
    ToolDefinition,
    ToolRegistry,
    build_default_registry,
)

__all__ = [
    "Action",
    "ActionExecutor",
    "InvalidParameter",
    "MalformedPlan",
    "MissingParameter",
    "OutputSpec",
    "ParameterSpec",
    "ParameterType",
    "Plan",
    "PlanInterpreter",
    "PlanStatus",
    "QueryLifecycle",
    "QueryState",
    "RegisteredTool",
    "RenderingDegraded",
    "ResponseRenderer",
    "ResultShape",
    "SuiSageAgent",
    "SuiSageError",
    "SymbolResolver",
    "ToolDefinition",
    "ToolExecutionFailure",
    "ToolRegistry",
    "UnknownSymbol",
    "UnknownTool",
    "build_default_registry",
    "normalize_coin_type",
    "parse_plan",
]
