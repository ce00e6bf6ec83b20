import pytest

from src.agents.node import MessageBuffer
from src.config.simulation_config import InstrumentationConfig
from src.instrumentation.observer import NodeInstrumentation

from helpers import ManualClock


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def inst_config(tmp_path):
    return InstrumentationConfig(window_size=300.0, log_dir=str(tmp_path / "logs"))


@pytest.fixture
def instrumentation(clock, inst_config):
    inst = NodeInstrumentation(clock, inst_config)
    inst.on_init(1, MessageBuffer(capacity=1000))
    return inst
