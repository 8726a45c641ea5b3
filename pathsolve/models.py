from __future__ import annotations

"""Dataclasses for parameter declarations, condition ASTs, and solve results.

These models define the input/output contracts between the external
front-end (which parses source text and explores paths) and the solving
core in this package.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union


BOOL = "bool"
BYTE = "byte"
SHORT = "short"
INT = "int"
LONG = "long"
STRING_ARRAY = "string[]"

INTEGER_TYPES = (BYTE, SHORT, INT, LONG)
DECLARED_TYPES = (BOOL,) + INTEGER_TYPES + (STRING_ARRAY,)

# Inclusive value range per integer width.
TYPE_RANGES: Dict[str, Tuple[int, int]] = {
    BYTE: (0, 255),
    SHORT: (-(2**15), 2**15 - 1),
    INT: (-(2**31), 2**31 - 1),
    LONG: (-(2**63), 2**63 - 1),
}

ARITH_OPS = ("+", "-", "*", "/", "%")
RELATIONAL_OPS = (">", "<", ">=", "<=")
EQUALITY_OPS = ("==", "!=")
LOGICAL_OPS = ("&&", "||")
BINARY_OPS = ARITH_OPS + RELATIONAL_OPS + EQUALITY_OPS + LOGICAL_OPS
UNARY_OPS = ("!", "-", "+")

LITERAL_KINDS = ("numeric", "true", "false")

# Returned when the path conditions cannot be satisfied.
NO_MODEL = None


class InternalFault(RuntimeError):
    """A translator or solver defect; never recovered inside the core."""


@dataclass(frozen=True)
class Unsupported:
    """An expression outside the translatable fragment.

    Returned as a value rather than raised, so callers decide whether the
    limitation is recoverable (conditions) or fatal (parameters).
    """
    reason: str


def is_unsupported(value: object) -> bool:
    return isinstance(value, Unsupported)


@dataclass(frozen=True)
class ParameterDeclaration:
    """A typed parameter of the function under test."""
    name: str
    declared_type: str


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Literal:
    """Literal token. ``storage`` is the literal's own numeric type."""
    kind: str
    value: object = None
    storage: Optional[str] = None


@dataclass(frozen=True)
class Binary:
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Unary:
    op: str
    operand: Expr


@dataclass(frozen=True)
class Parenthesized:
    inner: Expr


@dataclass(frozen=True)
class Cast:
    target_type: str
    inner: Expr


@dataclass(frozen=True)
class Invocation:
    callee: Expr
    arguments: Sequence[Expr] = ()


@dataclass(frozen=True)
class PredefinedType:
    """A keyword type used as an expression, e.g. the ``int`` in ``int.MaxValue``."""
    name: str


@dataclass(frozen=True)
class MemberAccess:
    target: Expr
    member: str


@dataclass(frozen=True)
class ArrayType:
    element_type: str


Expr = Union[
    Identifier,
    Literal,
    Binary,
    Unary,
    Parenthesized,
    Cast,
    Invocation,
    MemberAccess,
    PredefinedType,
    ArrayType,
]


@dataclass(frozen=True)
class SymbolicParameter:
    """A parameter paired with the solver constant standing in for it."""
    declaration: ParameterDeclaration
    term: object

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def declared_type(self) -> str:
        return self.declaration.declared_type


@dataclass(frozen=True)
class SkippedCondition:
    """A condition replaced by ``true`` because it could not be translated."""
    index: int
    reason: str


@dataclass(frozen=True)
class SolveRequest:
    """Parameters and path conditions for one solve call."""
    parameters: Sequence[ParameterDeclaration]
    conditions: Sequence[Expr]


@dataclass(frozen=True)
class SolveOutcome:
    """Result of one solve call plus per-call diagnostics.

    status is one of {"sat", "unsat", "empty"}.
    """
    status: str
    values: Optional[List[str]]
    skipped: Sequence[SkippedCondition] = field(default_factory=tuple)
    solver_time_ms: float = 0.0
