"""
Query orchestration: interpret, execute, render.

``SuiSageAgent.answer`` is the single entry point. It never raises; every
failure becomes an error response, and each query walks the lifecycle
below exactly once::

    RECEIVED -> INTERPRETING -> NEEDS_INFO | FAILED | EXECUTING
    EXECUTING -> FAILED | RENDERING
    RENDERING -> SUCCEEDED
"""

import logging
import uuid
from typing import Dict, FrozenSet, List, Optional

import structlog

from ..providers.base import MarketDataProvider
from ..providers.llm.base import LLMProvider, LLMProviderError
from ..types import ActionResult, QueryResponse
from .errors import MalformedPlan, SuiSageError
from .executor import ActionExecutor
from .interpreter import PlanInterpreter
from .models import PlanStatus, QueryState
from .renderer import ResponseRenderer
from .symbols import SymbolResolver
from .tools import ToolRegistry, build_default_registry

DEFAULT_INFO_REQUEST = "Could you provide more details about what you want to look up?"
DEFAULT_ERROR_MESSAGE = "I couldn't answer that query."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while processing your query."

_TRANSITIONS: Dict[QueryState, FrozenSet[QueryState]] = {
    QueryState.RECEIVED: frozenset({QueryState.INTERPRETING}),
    QueryState.INTERPRETING: frozenset({QueryState.NEEDS_INFO, QueryState.FAILED, QueryState.EXECUTING}),
    QueryState.EXECUTING: frozenset({QueryState.FAILED, QueryState.RENDERING}),
    QueryState.RENDERING: frozenset({QueryState.SUCCEEDED}),
    QueryState.NEEDS_INFO: frozenset(),
    QueryState.FAILED: frozenset(),
    QueryState.SUCCEEDED: frozenset(),
}


class QueryLifecycle:
    """Tracks the state of one query and rejects illegal transitions."""

    def __init__(self, query_id: str, logger: Optional[logging.Logger] = None):
        self.query_id = query_id
        self.state = QueryState.RECEIVED
        self.history: List[QueryState] = [QueryState.RECEIVED]
        self.logger = logger or logging.getLogger(__name__)

    @property
    def terminal(self) -> bool:
        return not _TRANSITIONS[self.state]

    def advance(self, target: QueryState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal query transition {self.state.value} -> {target.value}")
        self.logger.debug(f"Query {self.query_id}: {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)


class SuiSageAgent:
    """Answers natural-language DeFi questions about Sui."""

    def __init__(
        self,
        interpreter: PlanInterpreter,
        executor: ActionExecutor,
        renderer: ResponseRenderer,
        logger: Optional[logging.Logger] = None,
    ):
        self.interpreter = interpreter
        self.executor = executor
        self.renderer = renderer
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def build(
        cls,
        llm: LLMProvider,
        market: MarketDataProvider,
        symbols: SymbolResolver,
        *,
        default_network: str = "MAINNET",
        registry: Optional[ToolRegistry] = None,
    ) -> "SuiSageAgent":
        """Wire the pipeline around one LLM and one market data provider."""
        registry = registry or build_default_registry(market, default_network=default_network)
        return cls(
            interpreter=PlanInterpreter(llm, registry, symbols),
            executor=ActionExecutor(registry, symbols),
            renderer=ResponseRenderer(registry, symbols),
        )

    async def answer(self, query: str, query_id: Optional[str] = None) -> QueryResponse:
        query_id = query_id or uuid.uuid4().hex[:8]
        with structlog.contextvars.bound_contextvars(query_id=query_id):
            lifecycle = QueryLifecycle(query_id, self.logger)
            try:
                return await self._run(query, lifecycle)
            except Exception:
                self.logger.exception(f"Unexpected failure while answering query {query_id}")
                return self._fail(lifecycle, UNEXPECTED_ERROR_MESSAGE)

    async def _run(self, query: str, lifecycle: QueryLifecycle) -> QueryResponse:
        lifecycle.advance(QueryState.INTERPRETING)
        try:
            plan = await self.interpreter.interpret(query)
        except MalformedPlan as exc:
            return self._fail(lifecycle, f"Could not understand the model response: {exc}")
        except LLMProviderError as exc:
            self.logger.warning(f"LLM call failed: {exc}")
            return self._fail(lifecycle, f"Language model request failed: {exc}")

        if plan.status == PlanStatus.NEEDS_INFO:
            lifecycle.advance(QueryState.NEEDS_INFO)
            return QueryResponse.needs_info(plan.request or DEFAULT_INFO_REQUEST)

        if plan.status == PlanStatus.ERROR:
            message = plan.error_message or plan.reasoning or DEFAULT_ERROR_MESSAGE
            return self._fail(lifecycle, message)

        lifecycle.advance(QueryState.EXECUTING)
        try:
            results: List[ActionResult] = await self.executor.execute(plan.actions)
        except SuiSageError as exc:
            self.logger.info(f"Execution aborted: {exc}")
            return self._fail(lifecycle, str(exc))

        lifecycle.advance(QueryState.RENDERING)
        final_answer = self.renderer.render(plan.answer_template, results)

        lifecycle.advance(QueryState.SUCCEEDED)
        return QueryResponse.success(final_answer, results, plan.reasoning)

    def _fail(self, lifecycle: QueryLifecycle, message: str) -> QueryResponse:
        if QueryState.FAILED in _TRANSITIONS[lifecycle.state]:
            lifecycle.advance(QueryState.FAILED)
        return QueryResponse.failure(message)
