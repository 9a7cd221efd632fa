from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional, Tuple

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError, UnexpectedCharacters, UnexpectedInput

from .exceptions import ParseError

GRAMMAR_PATH = Path(__file__).with_name("notation_grammar.lark")


@lru_cache(maxsize=1)
def _build_lark() -> Lark:
    grammar = GRAMMAR_PATH.read_text()
    return Lark(
        grammar,
        parser="lalr",
        start="start",
        maybe_placeholders=False,
    )


@dataclass(frozen=True)
class Notation:
    """Parsed einsum notation: one symbol string per operand plus the output."""

    inputs: Tuple[str, ...]
    output: str
    explicit: bool = True
    text: str = ""

    @property
    def symbols(self) -> Tuple[str, ...]:
        """Every input symbol once, in order of first appearance."""
        return tuple(dict.fromkeys("".join(self.inputs)))

    @property
    def contracted(self) -> Tuple[str, ...]:
        return tuple(symbol for symbol in self.symbols if symbol not in self.output)

    def __str__(self) -> str:
        return f"{','.join(self.inputs)}->{self.output}"


class _NotationXform(Transformer):
    def operand(self, items: List[Token]) -> str:
        return "".join(str(tok) for tok in items)

    def output(self, items: List[Token]) -> List[Token]:
        return list(items)

    def inputs(self, items: List[str]) -> Tuple[str, ...]:
        return tuple(items)

    def start(self, items: List[Any]) -> Tuple[Tuple[str, ...], Optional[List[Token]]]:
        if len(items) == 1:
            return items[0], None
        return items[0], items[1]


def _implicit_output(inputs: Tuple[str, ...]) -> str:
    counts = Counter("".join(inputs))
    return "".join(symbol for symbol in dict.fromkeys("".join(inputs)) if counts[symbol] == 1)


def parse_notation(text: str) -> Notation:
    """
    Parse ``"a1a2,b1b2,...->o1o2..."`` into per-operand symbol strings.

    Only syntax is checked here: the number of segments against the operand
    list and index sizes are validated by the shape checker. When ``->`` is
    absent the output keeps every symbol that occurs exactly once, in order
    of first appearance.
    """

    if not isinstance(text, str):
        raise ParseError(f"Einsum notation must be a string, got {type(text).__name__}")
    return _parse_cached(text)


@lru_cache(maxsize=512)
def _parse_cached(text: str) -> Notation:
    try:
        tree = _build_lark().parse(text)
    except UnexpectedCharacters as exc:
        raise ParseError(
            f"Unexpected character {exc.char!r} in einsum notation",
            column=exc.column,
            notation=text,
        ) from exc
    except UnexpectedInput as exc:
        column = exc.column if isinstance(exc.column, int) and exc.column > 0 else None
        raise ParseError(
            "Malformed einsum notation",
            column=column,
            notation=text if column is not None else None,
        ) from exc
    except LarkError as exc:  # pragma: no cover
        raise ParseError(f"Malformed einsum notation: {exc}") from exc

    inputs, output_tokens = _NotationXform().transform(tree)
    if output_tokens is None:
        return Notation(inputs=inputs, output=_implicit_output(inputs), explicit=False, text=text)

    seen = set()
    for tok in output_tokens:
        symbol = str(tok)
        if symbol in seen:
            raise ParseError(
                f"Output index '{symbol}' appears more than once",
                column=tok.column,
                notation=text,
            )
        seen.add(symbol)
    output = "".join(str(tok) for tok in output_tokens)
    return Notation(inputs=inputs, output=output, explicit=True, text=text)
