"""Shorthand constructors for condition ASTs."""

from pathsolve.models import (
    Binary,
    Cast,
    Identifier,
    Invocation,
    Literal,
    MemberAccess,
    ParameterDeclaration,
    Parenthesized,
    PredefinedType,
    Unary,
)


def param(name: str, declared_type: str) -> ParameterDeclaration:
    return ParameterDeclaration(name, declared_type)


def ident(name: str) -> Identifier:
    return Identifier(name)


def num(value: int, storage: str = "int") -> Literal:
    return Literal("numeric", value, storage)


def true() -> Literal:
    return Literal("true")


def false() -> Literal:
    return Literal("false")


def binop(left, op: str, right) -> Binary:
    return Binary(op, left, right)


def neg(operand) -> Unary:
    return Unary("-", operand)


def not_(operand) -> Unary:
    return Unary("!", operand)


def paren(inner) -> Parenthesized:
    return Parenthesized(inner)


def cast(target_type: str, inner) -> Cast:
    return Cast(target_type, inner)


def call(name: str, *args) -> Invocation:
    return Invocation(Identifier(name), tuple(args))


def limit(type_name: str, member: str) -> MemberAccess:
    return MemberAccess(PredefinedType(type_name), member)
