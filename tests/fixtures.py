# type: ignore
import random

import pytest

from chipvm.common.settings import Settings
from chipvm.runtime.state import MachineState
from chipvm.runtime.cpu import CPU


@pytest.fixture
def with_state():
    state = MachineState()
    state.load_font()
    yield state


@pytest.fixture
def with_cpu(with_state):
    yield CPU(with_state, rng=random.Random(1234))


@pytest.fixture
def with_settings():
    yield Settings().update(cycles_per_frame=10, frame_delay_ms=0)
