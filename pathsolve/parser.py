from __future__ import annotations

"""Decoders for JSON-shaped parameter lists and condition ASTs.

The path exploration driver emits one ``solve_request`` record per path:

    {"kind": "solve_request",
     "params": [{"name": "x", "type": "int"}],
     "conditions": [{"kind": "binary", "op": ">",
                     "lhs": {"kind": "identifier", "name": "x"},
                     "rhs": {"kind": "literal", "type": "numeric", "value": 0}}]}
"""

import json
from typing import Iterable, List

from .models import (
    ArrayType,
    Binary,
    Cast,
    Expr,
    Identifier,
    Invocation,
    Literal,
    MemberAccess,
    ParameterDeclaration,
    Parenthesized,
    PredefinedType,
    SolveRequest,
    Unary,
)


def read_ndjson(path: str) -> Iterable[dict]:
    """Yield JSON objects from an NDJSON file.

    Inputs:
    - path: filesystem path to NDJSON.
    Output:
    - Iterator of dicts, one per non-empty line.
    """
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            yield json.loads(line)


def _field(rec: dict, key: str) -> object:
    if not isinstance(rec, dict):
        raise ValueError(f"expected a JSON object, got {rec!r}")
    if key not in rec:
        raise ValueError(f"missing field {key!r} in {rec.get('kind', 'record')}: {rec}")
    return rec[key]


def parse_parameter(rec: dict) -> ParameterDeclaration:
    """Decode a {"name", "type"} record."""
    return ParameterDeclaration(name=_field(rec, "name"), declared_type=_field(rec, "type"))


def parse_expr(rec: dict) -> Expr:
    """Decode one expression record (recursively) into an AST node."""
    kind = _field(rec, "kind")
    if kind == "identifier":
        return Identifier(name=_field(rec, "name"))
    if kind == "literal":
        return Literal(kind=_field(rec, "type"), value=rec.get("value"), storage=rec.get("storage"))
    if kind == "binary":
        return Binary(
            op=_field(rec, "op"),
            left=parse_expr(_field(rec, "lhs")),
            right=parse_expr(_field(rec, "rhs")),
        )
    if kind == "unary":
        return Unary(op=_field(rec, "op"), operand=parse_expr(_field(rec, "operand")))
    if kind == "parenthesized":
        return Parenthesized(inner=parse_expr(_field(rec, "expr")))
    if kind == "cast":
        return Cast(target_type=_field(rec, "type"), inner=parse_expr(_field(rec, "expr")))
    if kind == "invocation":
        return Invocation(
            callee=parse_expr(_field(rec, "callee")),
            arguments=tuple(parse_expr(a) for a in rec.get("args", [])),
        )
    if kind == "member_access":
        return MemberAccess(target=parse_expr(_field(rec, "target")), member=_field(rec, "member"))
    if kind == "predefined_type":
        return PredefinedType(name=_field(rec, "name"))
    if kind == "array_type":
        return ArrayType(element_type=_field(rec, "element"))
    raise ValueError(f"unknown expression kind: {kind}")


def parse_request(rec: dict) -> SolveRequest:
    """Decode a solve_request record."""
    return SolveRequest(
        parameters=[parse_parameter(p) for p in rec.get("params", [])],
        conditions=[parse_expr(c) for c in rec.get("conditions", [])],
    )


def load_requests(path: str) -> List[SolveRequest]:
    """Load every solve_request record from an NDJSON file."""
    out: List[SolveRequest] = []
    for rec in read_ndjson(path):
        if rec.get("kind") != "solve_request":
            continue
        out.append(parse_request(rec))
    return out
