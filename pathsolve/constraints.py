from __future__ import annotations

"""Constraint builder for a single solve call.

This module turns parameter declarations into symbolic constants and path
conditions into Bool constraints. Conditions outside the translatable
fragment are replaced by ``true`` so that an input is still produced.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from .models import (
    Expr,
    InternalFault,
    ParameterDeclaration,
    SkippedCondition,
    SymbolicParameter,
    is_unsupported,
)
from .translator import Translator

logger = logging.getLogger(__name__)


@dataclass
class ConstraintBuilder:
    """Builds and stores the symbols and constraints of one solve call.

    symbols: one SymbolicParameter per declaration, in declaration order.
    constraints: one Bool term per condition, in condition order.
    skipped: conditions that were replaced by ``true``.
    """
    translator: Translator
    symbols: List[SymbolicParameter] = field(default_factory=list)
    constraints: List[object] = field(default_factory=list)
    skipped: List[SkippedCondition] = field(default_factory=list)

    def add_parameters(self, parameters: Sequence[ParameterDeclaration]) -> None:
        """Declare a symbolic constant for every parameter."""
        for param in parameters:
            self.add_parameter(param)

    def add_parameter(self, param: ParameterDeclaration) -> SymbolicParameter:
        """Declare one parameter; an untranslatable declaration is fatal."""
        term = self.translator.declare(param)
        if is_unsupported(term):
            raise InternalFault(f"unsupported parameter declaration {param.name!r}: {term.reason}")
        symbol = SymbolicParameter(declaration=param, term=term)
        self.symbols.append(symbol)
        return symbol

    def add_conditions(self, conditions: Sequence[Expr]) -> None:
        """Translate every path condition into a constraint."""
        for cond in conditions:
            self.add_condition(cond)

    def add_condition(self, cond: Expr) -> object:
        """Translate one condition, substituting ``true`` when unsupported."""
        term = self.translator.translate_condition(cond)
        if is_unsupported(term):
            index = len(self.constraints)
            logger.debug("condition %d replaced by true: %s", index, term.reason)
            self.skipped.append(SkippedCondition(index=index, reason=term.reason))
            term = self.translator.true()
        self.constraints.append(term)
        return term

    def conjunction(self) -> object:
        """Return the conjunction of all constraints (``true`` when empty)."""
        if not self.constraints:
            return self.translator.true()
        return self.translator.conjoin(self.constraints)
