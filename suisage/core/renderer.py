"""Turns executed results and the plan's answer template into the final text."""

import logging
from typing import Optional, Sequence

from ..types import ActionResult
from .formatters import format_shape
from .symbols import SymbolResolver
from .template import PLACEHOLDER_RE, Reference, substitute
from .tools import RegisteredTool, ResultShape, ToolRegistry

# Layout of one element picked out of a collection-shaped output.
ELEMENT_SHAPES = {
    ResultShape.PRICE_MAP: ResultShape.PRICED_ASSET,
    ResultShape.POOL_LIST: ResultShape.POOL,
}


class ResponseRenderer:
    """
    Renders results in one of two ways.

    A tool that declares a result shape gets its dedicated layout when the
    template adds nothing beyond the raw result. Otherwise every ``${...}``
    in the template is substituted, leaving unresolvable ones as written.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        symbols: SymbolResolver,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.symbols = symbols
        self.logger = logger or logging.getLogger(__name__)

    def _template_for(self, answer_template: Optional[str], tool: Optional[RegisteredTool]) -> Optional[str]:
        if answer_template is not None:
            return answer_template
        if tool is not None:
            return tool.definition.output.answer_template
        return None

    @staticmethod
    def _wants_dedicated(template: Optional[str]) -> bool:
        if template is None or not template.strip():
            return True
        if template.strip() == "${result}":
            return True
        return PLACEHOLDER_RE.search(template) is None

    def render(self, answer_template: Optional[str], results: Sequence[ActionResult]) -> str:
        first_tool = self.registry.get(results[0].tool) if results else None
        template = self._template_for(answer_template, first_tool)

        if not results:
            return template or ""

        first = results[0]
        shape = first_tool.definition.output.shape if first_tool else None

        if shape is not None and self._wants_dedicated(template):
            formatted = format_shape(shape, first.output, first.input, self.symbols)
            if formatted is not None:
                return formatted
            self.logger.debug(f"Dedicated {shape.value} layout did not fit {first.tool} output")

        if template is None or not template.strip():
            return substitute("${result}", results, self.symbols, self._format_object)

        return substitute(template, results, self.symbols, self._format_object)

    def _shape_of(self, result: ActionResult) -> Optional[ResultShape]:
        tool = self.registry.get(result.tool)
        return tool.definition.output.shape if tool else None

    def _format_object(self, reference: Reference) -> Optional[str]:
        """Lay out an object leaf using the tool and input of the result it came from."""
        origin = reference.origin
        if origin is None:
            return None
        shape = self._shape_of(origin)
        if shape is None:
            return None

        if reference.is_whole_output:
            return format_shape(shape, reference.value, origin.input, self.symbols)

        steps = ([reference.key] if reference.key is not None else []) + list(reference.path)
        element = ELEMENT_SHAPES.get(shape)
        if element is None or len(steps) != 1:
            return None

        arguments = origin.input
        if element is ResultShape.PRICED_ASSET:
            # A price map entry is named by its own coin type key.
            arguments = {"token_type": str(steps[0])}
        return format_shape(element, reference.value, arguments, self.symbols)
