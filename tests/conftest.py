from typing import Iterator

import pytest
import z3

from pathsolve.solver import Z3Solver


@pytest.fixture
def solver() -> Z3Solver:
    return Z3Solver()


@pytest.fixture
def ctx() -> Iterator[z3.Context]:
    yield z3.Context()
