import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from config import SimulationConfig  # noqa: E402


@pytest.fixture
def config() -> SimulationConfig:
    return SimulationConfig()


@pytest.fixture
def small_config() -> SimulationConfig:
    """A small economy that runs quickly: 20 poor, 3 rich, the default businesses."""
    return SimulationConfig().override({"init.people.poor": 20, "init.people.rich": 3})


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
