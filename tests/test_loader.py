"""Test loading of workloads and targets."""

import pytest

from loadclient.core.config import TargetConfig
from loadclient.core.errors import ConfigurationError
from loadclient.drivers.loader import load_target, load_workload
from loadclient.drivers.simulated import SimulatedTarget
from loadclient.workloads.simple import SimpleWorkload


WORKLOAD_FILE = '''
info = "file workload"

async def init(context, args):
    pass

async def run():
    return 1

def end():
    pass
'''


class TestLoadWorkload:
    """Test workload resolution."""

    def test_dotted_class(self):
        workload = load_workload("loadclient.workloads.simple:SimpleWorkload")
        assert isinstance(workload, SimpleWorkload)

    def test_file_module(self, tmp_path):
        path = tmp_path / "my_workload.py"
        path.write_text(WORKLOAD_FILE)

        workload = load_workload(str(path))

        assert workload.info == "file workload"
        assert callable(workload.run)

    def test_module_without_hooks(self):
        with pytest.raises(ConfigurationError, match="lacks init, run, end"):
            load_workload("loadclient.workloads")

    def test_missing_module(self):
        with pytest.raises(ConfigurationError):
            load_workload("no.such.workload")

    def test_missing_attribute(self):
        with pytest.raises(ConfigurationError, match="no attribute"):
            load_workload("loadclient.workloads.simple:Nope")


class TestLoadTarget:
    """Test target class resolution."""

    def test_load_simulated_target(self):
        config = TargetConfig(targetClass="loadclient.drivers.simulated.SimulatedTarget",
                              settings={"latency_ms": 5})

        target = load_target(config)

        assert isinstance(target, SimulatedTarget)
        assert target.latency_ms == 5
        assert target.target_name == "target"

    def test_missing_class(self):
        with pytest.raises(ConfigurationError):
            load_target(TargetConfig(targetClass="loadclient.drivers.simulated.Nope"))

    def test_not_a_target(self):
        with pytest.raises(ConfigurationError, match="not an AbstractTarget"):
            load_target(TargetConfig(targetClass="loadclient.workloads.simple.SimpleWorkload"))
