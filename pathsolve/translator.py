from __future__ import annotations

"""Expression translator from condition ASTs to Z3 terms.

Parameters become Z3 constants (bool -> Bool, byte/short/int/long -> Int,
string[] -> Array(String, String)); conditions become Bool terms. Integer
widths are not enforced here: constants range over the unbounded integers
and the solver backend clamps model values to the declared width.

Expressions the fragment deliberately excludes come back as ``Unsupported``
values. Shapes the translator does not understand raise ``InternalFault``.
"""

from typing import Callable, Dict, List, Sequence, get_args

from .models import (
    ARITH_OPS,
    BINARY_OPS,
    BOOL,
    DECLARED_TYPES,
    EQUALITY_OPS,
    INTEGER_TYPES,
    LITERAL_KINDS,
    LOGICAL_OPS,
    RELATIONAL_OPS,
    STRING_ARRAY,
    TYPE_RANGES,
    ArrayType,
    Binary,
    Cast,
    Expr,
    Identifier,
    Invocation,
    InternalFault,
    Literal,
    MemberAccess,
    ParameterDeclaration,
    Parenthesized,
    PredefinedType,
    Unary,
    Unsupported,
    is_unsupported,
)


def _sort_family(declared_type: str) -> str:
    """Map a declared type onto the name of the Z3 sort that models it."""
    if declared_type == BOOL:
        return "bool"
    if declared_type in INTEGER_TYPES:
        return "int"
    if declared_type == STRING_ARRAY:
        return "array"
    raise InternalFault(f"unknown declared type: {declared_type}")


def _term_family(z3, term: object) -> str:
    if z3.is_bool(term):
        return "bool"
    if z3.is_int(term):
        return "int"
    if z3.is_array(term):
        return "array"
    return "other"


def _trunc_div(z3, a: object, b: object) -> object:
    """Integer division rounding toward zero.

    Z3's ``div`` is Euclidean; on absolute values it agrees with truncation,
    so the quotient magnitude is computed there and the sign restored.
    """
    abs_a = z3.If(a >= 0, a, -a)
    abs_b = z3.If(b >= 0, b, -b)
    quotient = abs_a / abs_b
    return z3.If((a >= 0) == (b >= 0), quotient, -quotient)


def _trunc_mod(z3, a: object, b: object) -> object:
    """Remainder of truncating division; takes the sign of the dividend."""
    return a - b * _trunc_div(z3, a, b)


class Translator:
    """Translate expression nodes into terms within a single Z3 context."""

    def __init__(self, z3, ctx: object, parameters: Sequence[ParameterDeclaration]) -> None:
        self._z3 = z3
        self._ctx = ctx
        self.parameters: List[ParameterDeclaration] = list(parameters)
        # Definedness side conditions (non-zero divisors) of the current condition.
        self._guards: List[object] = []

    def declare(self, parameter: ParameterDeclaration) -> object:
        """Build the symbolic constant for a parameter declaration."""
        if not parameter.name:
            return Unsupported("parameter has no name")
        return self._constant(parameter.name, parameter.declared_type)

    def translate_condition(self, node: Expr) -> object:
        """Translate a path condition into a Bool term, guards included."""
        z3 = self._z3
        self._guards = []
        term = self.translate(node)
        guards, self._guards = self._guards, []
        if is_unsupported(term):
            return term
        if not z3.is_bool(term):
            return Unsupported(f"condition is not boolean: {term.sort()}")
        if guards:
            return z3.And(*guards, term)
        return term

    def true(self) -> object:
        return self._z3.BoolVal(True, self._ctx)

    def conjoin(self, terms: Sequence[object]) -> object:
        return self._z3.And(*terms)

    def translate(self, node: Expr) -> object:
        """Translate any expression node; the single dispatch point."""
        handler = _DISPATCH.get(type(node))
        if handler is None:
            raise InternalFault(f"unknown expression node: {type(node).__name__}")
        return handler(self, node)

    def _constant(self, name: str, declared_type: str) -> object:
        z3 = self._z3
        family = _sort_family(declared_type)
        if family == "bool":
            return z3.Bool(name, self._ctx)
        if family == "int":
            return z3.Int(name, self._ctx)
        string = z3.StringSort(self._ctx)
        return z3.Array(name, string, string)

    def _lookup(self, name: str) -> object:
        matches = [p for p in self.parameters if p.name == name]
        if len(matches) != 1:
            return Unsupported(f"identifier {name!r} matches {len(matches)} parameters")
        return matches[0]

    def _identifier(self, node: Identifier) -> object:
        param = self._lookup(node.name)
        if is_unsupported(param):
            return param
        return self._constant(param.name, param.declared_type)

    def _literal(self, node: Literal) -> object:
        z3 = self._z3
        if node.kind not in LITERAL_KINDS:
            raise InternalFault(f"unknown literal kind: {node.kind}")
        if node.kind == "true":
            return z3.BoolVal(True, self._ctx)
        if node.kind == "false":
            return z3.BoolVal(False, self._ctx)
        storage = node.storage or "int"
        if storage not in INTEGER_TYPES:
            return Unsupported(f"{storage} literal")
        if isinstance(node.value, bool) or not isinstance(node.value, int):
            return Unsupported(f"non-integer numeric literal: {node.value!r}")
        return z3.IntVal(node.value, self._ctx)

    def _binary(self, node: Binary) -> object:
        z3 = self._z3
        left = self.translate(node.left)
        if node.op in LOGICAL_OPS:
            # Right-hand guards only apply when the right side is evaluated.
            outer, self._guards = self._guards, []
            right = self.translate(node.right)
            right_guards, self._guards = self._guards, outer
        else:
            right = self.translate(node.right)
            right_guards = []
        if is_unsupported(left):
            return left
        if is_unsupported(right):
            return right
        if node.op not in BINARY_OPS:
            raise InternalFault(f"unknown binary operator: {node.op}")

        if node.op in ARITH_OPS:
            if not (z3.is_int(left) and z3.is_int(right)):
                return Unsupported(f"'{node.op}' needs integer operands")
            if node.op == "+":
                return left + right
            if node.op == "-":
                return left - right
            if node.op == "*":
                return left * right
            self._guard_divisor(right)
            if node.op == "/":
                return _trunc_div(z3, left, right)
            return _trunc_mod(z3, left, right)

        if node.op in RELATIONAL_OPS:
            if not (z3.is_arith(left) and z3.is_arith(right)):
                return Unsupported(f"'{node.op}' needs arithmetic operands")
            if node.op == ">":
                return left > right
            if node.op == "<":
                return left < right
            if node.op == ">=":
                return left >= right
            return left <= right

        if node.op in EQUALITY_OPS:
            if left.sort() != right.sort():
                return Unsupported(f"'{node.op}' between {left.sort()} and {right.sort()}")
            if node.op == "==":
                return left == right
            return z3.Not(left == right)

        if not (z3.is_bool(left) and z3.is_bool(right)):
            return Unsupported(f"'{node.op}' needs boolean operands")
        if node.op == "&&":
            if right_guards:
                self._guards.append(z3.Implies(left, z3.And(*right_guards)))
            return z3.And(left, right)
        if right_guards:
            self._guards.append(z3.Implies(z3.Not(left), z3.And(*right_guards)))
        return z3.Or(left, right)

    def _guard_divisor(self, divisor: object) -> None:
        z3 = self._z3
        if z3.is_int_value(divisor) and divisor.as_long() != 0:
            return
        self._guards.append(z3.Not(divisor == 0))

    def _unary(self, node: Unary) -> object:
        z3 = self._z3
        operand = self.translate(node.operand)
        if is_unsupported(operand):
            return operand
        if node.op == "!":
            if not z3.is_bool(operand):
                return Unsupported("'!' needs a boolean operand")
            return z3.Not(operand)
        if node.op in ("-", "+"):
            if not z3.is_int(operand):
                return Unsupported(f"unary '{node.op}' needs an integer operand")
            return -operand if node.op == "-" else operand
        raise InternalFault(f"unknown unary operator: {node.op}")

    def _parenthesized(self, node: Parenthesized) -> object:
        return self.translate(node.inner)

    def _cast(self, node: Cast) -> object:
        if node.target_type not in DECLARED_TYPES:
            return Unsupported(f"cast to {node.target_type}")
        family = _sort_family(node.target_type)
        if isinstance(node.inner, Identifier):
            param = self._lookup(node.inner.name)
            if is_unsupported(param):
                return param
            if _sort_family(param.declared_type) != family:
                return Unsupported(f"cast of {param.declared_type} {param.name} to {node.target_type}")
            return self._constant(param.name, node.target_type)
        inner = self.translate(node.inner)
        if is_unsupported(inner):
            return inner
        if _term_family(self._z3, inner) != family:
            return Unsupported(f"cast of {inner.sort()} to {node.target_type}")
        return inner

    def _invocation(self, node: Invocation) -> object:
        return Unsupported("invocation expressions are not supported")

    def _member_access(self, node: MemberAccess) -> object:
        target = node.target
        if (
            isinstance(target, PredefinedType)
            and target.name in INTEGER_TYPES
            and node.member in ("MaxValue", "MinValue")
        ):
            low, high = TYPE_RANGES[target.name]
            value = high if node.member == "MaxValue" else low
            return self._z3.IntVal(value, self._ctx)
        raise InternalFault(f"unknown member access: {node.member}")

    def _predefined_type(self, node: PredefinedType) -> object:
        raise InternalFault(f"type {node.name} used as a value")

    def _array_type(self, node: ArrayType) -> object:
        """Placeholder array: every string key maps to the empty string."""
        z3 = self._z3
        if node.element_type != "string":
            raise InternalFault(f"unknown array type: {node.element_type}[]")
        return z3.K(z3.StringSort(self._ctx), z3.StringVal("", self._ctx))


_DISPATCH: Dict[type, Callable[[Translator, Expr], object]] = {
    Identifier: Translator._identifier,
    Literal: Translator._literal,
    Binary: Translator._binary,
    Unary: Translator._unary,
    Parenthesized: Translator._parenthesized,
    Cast: Translator._cast,
    Invocation: Translator._invocation,
    MemberAccess: Translator._member_access,
    PredefinedType: Translator._predefined_type,
    ArrayType: Translator._array_type,
}

_unhandled = set(get_args(Expr)) - set(_DISPATCH)
if _unhandled:
    raise ImportError(f"no translation for: {sorted(t.__name__ for t in _unhandled)}")
