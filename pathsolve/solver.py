from __future__ import annotations

"""Solver interface and Z3 backend.

A solve call declares one Z3 constant per parameter, conjoins the translated
path conditions, checks satisfiability and projects the model back onto the
parameters as string literals, one per parameter, in declaration order.
"""

import logging
import time
from typing import List, Optional, Protocol, Sequence

from .constraints import ConstraintBuilder
from .models import (
    BOOL,
    INTEGER_TYPES,
    NO_MODEL,
    TYPE_RANGES,
    ArrayType,
    Expr,
    InternalFault,
    ParameterDeclaration,
    SolveOutcome,
    SymbolicParameter,
)
from .translator import Translator

logger = logging.getLogger(__name__)


class SolverBase(Protocol):
    """Protocol for solver backends."""
    def get_model(
        self, parameters: Sequence[ParameterDeclaration], conditions: Sequence[Expr]
    ) -> Optional[List[str]]: ...

    def try_get_model(
        self, parameters: Sequence[ParameterDeclaration], conditions: Sequence[Expr]
    ) -> Optional[List[str]]: ...


def clamp(value: int, declared_type: str) -> int:
    """Project an unbounded integer into the range of its declared width."""
    low, high = TYPE_RANGES[declared_type]
    if value > high:
        return high
    if value < low:
        return low
    return value


class SolvingContext:
    """Z3 state owned by exactly one solve call.

    Use as a context manager; everything is released on exit, including when
    translation or checking fails part way through.
    """

    def __init__(self, z3, parameters: Sequence[ParameterDeclaration], random_seed: int = 0) -> None:
        self._z3 = z3
        self.ctx = z3.Context()
        self.translator = Translator(z3, self.ctx, parameters)
        self.builder = ConstraintBuilder(translator=self.translator)
        self.solver = z3.Solver(ctx=self.ctx)
        self.solver.set("random_seed", random_seed)
        self.model: Optional[object] = None
        self.closed = False

    def __enter__(self) -> SolvingContext:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Drop every term and the solver so the Z3 context can be freed."""
        if self.closed:
            return
        self.model = None
        self.builder.symbols.clear()
        self.builder.constraints.clear()
        self.solver.reset()
        self.builder = None
        self.translator = None
        self.solver = None
        self.ctx = None
        self.closed = True

    def check(self) -> bool:
        """Assert the conjunction and check it; True iff satisfiable."""
        z3 = self._z3
        self.solver.add(self.builder.conjunction())
        logger.debug("SAT check:\n%s", self.solver.sexpr())
        res = self.solver.check()
        if res == z3.unsat:
            return False
        if res == z3.sat:
            self.model = self.solver.model()
            logger.debug("model:\n%s", self.model)
            return True
        raise InternalFault(f"unknown satisfiability: {self.solver.reason_unknown()}")

    def extract(self, clamp_values: bool = True) -> List[str]:
        """Evaluate every parameter's constant against the model."""
        if self.model is None:
            raise InternalFault("no model to extract from")
        return [self._extract_one(symbol, clamp_values) for symbol in self.builder.symbols]

    def _extract_one(self, symbol: SymbolicParameter, clamp_values: bool) -> str:
        z3 = self._z3
        value = self.model.eval(symbol.term, model_completion=False)
        if value.eq(symbol.term):
            return self._default_literal(symbol)
        if symbol.declared_type == BOOL:
            if z3.is_true(value):
                return "true"
            if z3.is_false(value):
                return "false"
            return self._default_literal(symbol)
        if symbol.declared_type in INTEGER_TYPES:
            if not z3.is_int_value(value):
                value = self.model.eval(symbol.term, model_completion=True)
            number = value.as_long()
            if clamp_values:
                number = clamp(number, symbol.declared_type)
            return str(number)
        return str(value)

    def _default_literal(self, symbol: SymbolicParameter) -> str:
        """Literal for a parameter the model leaves unconstrained."""
        if symbol.declared_type == BOOL:
            return "false"
        if symbol.declared_type in INTEGER_TYPES:
            return "0"
        return str(self.translator.translate(ArrayType("string")))


class Z3Solver:
    """Z3 backend: one isolated context per call, no state between calls."""

    def __init__(self, random_seed: int = 0, clamp: bool = True) -> None:
        try:
            import z3  # type: ignore
        except Exception as exc:  # pragma: no cover - import-time error
            raise RuntimeError(
                "z3-solver is not installed. "
                "Install it via `pip install z3-solver`"
            ) from exc

        self._z3 = z3
        self.random_seed = random_seed
        self.clamp = clamp

    def solve(
        self, parameters: Sequence[ParameterDeclaration], conditions: Sequence[Expr]
    ) -> SolveOutcome:
        """Solve one path and report the result vector with diagnostics."""
        if not parameters:
            return SolveOutcome(status="empty", values=[])

        try:
            with SolvingContext(self._z3, parameters, self.random_seed) as call:
                call.builder.add_parameters(parameters)
                call.builder.add_conditions(conditions)
                skipped = tuple(call.builder.skipped)
                t0 = time.perf_counter()
                sat = call.check()
                solver_time_ms = (time.perf_counter() - t0) * 1000.0
                values = call.extract(self.clamp) if sat else NO_MODEL
        except self._z3.Z3Exception as exc:
            raise InternalFault(f"z3 error: {exc}") from exc
        except RecursionError as exc:
            raise InternalFault("condition nests too deeply to translate") from exc

        return SolveOutcome(
            status="sat" if sat else "unsat",
            values=values,
            skipped=skipped,
            solver_time_ms=solver_time_ms,
        )

    def get_model(
        self, parameters: Sequence[ParameterDeclaration], conditions: Sequence[Expr]
    ) -> Optional[List[str]]:
        """Return one literal per parameter, or NO_MODEL when unsatisfiable.

        Raises InternalFault on translator or solver defects.
        """
        return self.solve(parameters, conditions).values

    def try_get_model(
        self, parameters: Sequence[ParameterDeclaration], conditions: Sequence[Expr]
    ) -> Optional[List[str]]:
        """Like get_model, but maps InternalFault to NO_MODEL."""
        try:
            return self.get_model(parameters, conditions)
        except InternalFault as exc:
            logger.warning("solve failed, returning no model: %s", exc)
            return NO_MODEL
