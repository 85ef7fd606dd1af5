"""Error taxonomy for the query pipeline.

Every error except ``RenderingDegraded`` collapses into a single query-level
error response. ``RenderingDegraded`` never leaves the renderer.
"""

from typing import Optional


class SuiSageError(Exception):
    """Base class for query pipeline errors."""


class MalformedPlan(SuiSageError):
    """The model's output could not be turned into a valid plan."""


class UnknownTool(SuiSageError):
    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Unknown tool: {tool}")


class UnknownSymbol(SuiSageError):
    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Unknown coin symbol: {symbol}")


class MissingParameter(SuiSageError):
    def __init__(self, tool: str, parameter: str):
        self.tool = tool
        self.parameter = parameter
        super().__init__(f"Missing required input: {parameter} for tool {tool}")


class InvalidParameter(SuiSageError):
    def __init__(self, tool: str, parameter: str, reason: str):
        self.tool = tool
        self.parameter = parameter
        super().__init__(f"Invalid value for input {parameter} of tool {tool}: {reason}")


class ToolExecutionFailure(SuiSageError):
    def __init__(self, tool: str, cause: Optional[BaseException] = None):
        self.tool = tool
        self.cause = cause
        detail = str(cause) if cause is not None and str(cause) else type(cause).__name__
        super().__init__(f"Tool {tool} failed: {detail}")


class RenderingDegraded(SuiSageError):
    """A template expression could not be resolved; the placeholder is kept."""
