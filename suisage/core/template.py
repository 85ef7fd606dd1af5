"""
Path-addressed ``${...}`` substitution over tool results.

Grammar::

    expr     := root accessor*
    root     := "result" | "results"
    accessor := "." ident | "[" (quoted-string | integer) "]"

``result`` is the first result's output. ``results[i]`` is the i-th
result's output. ``results['KEY']`` picks an entry of the first output
mapping, matching KEY exactly, then as a coin symbol, then as a coin type
in either address form. Anything that fails to parse or resolve leaves the
placeholder text untouched.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from ..types import ActionResult
from .errors import RenderingDegraded
from ..coin_types import normalize_coin_type
from .symbols import SymbolResolver

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\$\{([^{}]*)\}")

NO_DATA_FOUND = "No data found"
NO_DATA_AVAILABLE = "No data available"

Segment = Union[str, int]


class _PathParser:
    """Recursive-descent parser for a single placeholder expression."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self) -> Tuple[str, List[Segment]]:
        self._skip_ws()
        root = self._ident()
        if root not in ("result", "results"):
            raise RenderingDegraded(f"unknown root '{root}'")
        segments: List[Segment] = []
        self._skip_ws()
        while not self._at_end():
            segments.append(self._accessor())
            self._skip_ws()
        return root, segments

    def _accessor(self) -> Segment:
        char = self._peek()
        if char == ".":
            self.pos += 1
            return self._ident(allow_leading_digit=True)
        if char == "[":
            self.pos += 1
            self._skip_ws()
            if self._peek() in ("'", '"'):
                segment: Segment = self._quoted()
            else:
                segment = self._integer()
            self._skip_ws()
            self._expect("]")
            return segment
        raise RenderingDegraded(f"unexpected {char!r} at {self.pos}")

    def _ident(self, allow_leading_digit: bool = False) -> str:
        start = self.pos
        while not self._at_end():
            char = self.text[self.pos]
            if char.isalnum() or char == "_":
                if self.pos == start and char.isdigit() and not allow_leading_digit:
                    break
                self.pos += 1
            else:
                break
        if self.pos == start:
            raise RenderingDegraded(f"expected a name at {start}")
        return self.text[start:self.pos]

    def _quoted(self) -> str:
        quote = self.text[self.pos]
        self.pos += 1
        chars: List[str] = []
        while not self._at_end():
            char = self.text[self.pos]
            self.pos += 1
            if char == "\\" and not self._at_end():
                chars.append(self.text[self.pos])
                self.pos += 1
            elif char == quote:
                return "".join(chars)
            else:
                chars.append(char)
        raise RenderingDegraded("unterminated string")

    def _integer(self) -> int:
        start = self.pos
        while not self._at_end() and self.text[self.pos].isdigit():
            self.pos += 1
        if self.pos == start:
            raise RenderingDegraded(f"expected an index at {start}")
        return int(self.text[start:self.pos])

    def _expect(self, char: str) -> None:
        if self._peek() != char:
            raise RenderingDegraded(f"expected {char!r} at {self.pos}")
        self.pos += 1

    def _peek(self) -> Optional[str]:
        return None if self._at_end() else self.text[self.pos]

    def _skip_ws(self) -> None:
        while not self._at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)


def parse_path(expression: str) -> Tuple[str, List[Segment]]:
    return _PathParser(expression).parse()


def _step(value: Any, segment: Segment) -> Any:
    if isinstance(value, Mapping):
        key = str(segment)
        if key in value:
            return value[key]
        raise RenderingDegraded(f"missing key {key!r}")
    if isinstance(value, (list, tuple)):
        if isinstance(segment, str) and segment.isdigit():
            segment = int(segment)
        if isinstance(segment, int) and 0 <= segment < len(value):
            return value[segment]
        raise RenderingDegraded(f"index {segment!r} out of range")
    raise RenderingDegraded(f"cannot walk into {type(value).__name__}")


def _match_key(
    mapping: Mapping[str, Any],
    key: str,
    symbols: Optional[SymbolResolver],
) -> Tuple[str, Any]:
    """Find ``key`` in ``mapping``; returns the mapping's own key and its value."""
    if key in mapping:
        return key, mapping[key]
    wanted = []
    if symbols is not None:
        coin_type = symbols.try_resolve(key)
        if coin_type is not None:
            wanted.append(normalize_coin_type(coin_type))
    wanted.append(normalize_coin_type(key))
    for candidate, item in mapping.items():
        if normalize_coin_type(candidate) in wanted:
            return candidate, item
    raise RenderingDegraded(f"no entry for {key!r}")


@dataclass(frozen=True)
class Reference:
    """A resolved placeholder and where its value came from.

    ``origin`` is the result whose output the walk started at (None for the
    bare ``results`` list). ``key`` is the output entry picked by
    ``results['KEY']``, and ``path`` the segments walked after that.
    """

    value: Any
    origin: Optional[ActionResult] = None
    key: Optional[str] = None
    path: Tuple[Segment, ...] = ()

    @property
    def is_whole_output(self) -> bool:
        return self.origin is not None and self.key is None and not self.path


def resolve_reference(
    expression: str,
    results: Sequence[ActionResult],
    symbols: Optional[SymbolResolver] = None,
) -> Reference:
    """Resolve one placeholder expression against ``results``. Raises RenderingDegraded."""
    if not results:
        raise RenderingDegraded("no results to address")
    root, segments = parse_path(expression)

    key: Optional[str] = None
    if root == "result":
        origin: Optional[ActionResult] = results[0]
        value = origin.output
    elif not segments:
        return Reference(value=[result.output for result in results])
    else:
        head, segments = segments[0], segments[1:]
        if isinstance(head, int):
            if head >= len(results):
                raise RenderingDegraded(f"result {head} out of range")
            origin = results[head]
            value = origin.output
        else:
            origin = results[0]
            if not isinstance(origin.output, Mapping):
                raise RenderingDegraded("first result is not a mapping")
            key, value = _match_key(origin.output, head, symbols)

    for segment in segments:
        value = _step(value, segment)
    return Reference(value=value, origin=origin, key=key, path=tuple(segments))


def resolve_path(
    expression: str,
    results: Sequence[ActionResult],
    symbols: Optional[SymbolResolver] = None,
) -> Any:
    return resolve_reference(expression, results, symbols).value


def format_leaf(value: Any, format_object: Optional[Callable[[Mapping[str, Any]], Optional[str]]] = None) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:.3f}"
    if isinstance(value, (list, tuple)):
        if not value:
            return NO_DATA_FOUND
        return json.dumps(value, indent=2, default=str)
    if isinstance(value, Mapping):
        formatted = format_object(value) if format_object else None
        return formatted if formatted is not None else json.dumps(value, indent=2, default=str)
    if value is None:
        return NO_DATA_AVAILABLE
    return str(value)


ObjectFormatter = Callable[[Reference], Optional[str]]


def substitute(
    template: str,
    results: Sequence[ActionResult],
    symbols: Optional[SymbolResolver] = None,
    format_object: Optional[ObjectFormatter] = None,
) -> str:
    """Replace every resolvable ``${...}`` in ``template``; keep the rest verbatim.

    ``format_object`` receives the whole Reference of an object leaf, so it
    can pick a layout from the result that produced the value.
    """

    def _replace(match: "re.Match[str]") -> str:
        try:
            reference = resolve_reference(match.group(1), results, symbols)
        except RenderingDegraded as exc:
            logger.debug(f"Keeping placeholder {match.group(0)}: {exc}")
            return match.group(0)
        formatter = None
        if format_object is not None:
            formatter = lambda value: format_object(reference)  # noqa: E731
        return format_leaf(reference.value, formatter)

    return PLACEHOLDER_RE.sub(_replace, template)
