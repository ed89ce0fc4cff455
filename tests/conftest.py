"""
Shared test fixtures for the NeonBit simulator.

Every fixture builds a fresh, in-process SegmentController so tests never
share register, stepper or history state. Configuration fixtures write to
pytest's ``tmp_path`` rather than the user's home directory.
"""

import pytest
import pytest_asyncio

from neonbit.controller import SegmentController
from neonbit.interface.config_manager import ConfigurationManager
from neonbit.interface.tone_notifier import ToneNotifier
from neonbit.modes import Mode


@pytest.fixture
def controller():
    """Controller in the default ANIMATION mode."""
    return SegmentController()


@pytest.fixture
def manual_controller():
    return SegmentController(initial_mode=Mode.MANUAL)


@pytest.fixture
def counter_controller():
    return SegmentController(initial_mode=Mode.COUNTER)


@pytest.fixture
def recorded_events(controller):
    """List that collects every event the `controller` fixture publishes."""
    events = []
    controller.add_listener(events.append)
    return events


@pytest.fixture
def notifier():
    return ToneNotifier()


@pytest.fixture
def config_manager(tmp_path):
    """ConfigurationManager rooted in a temporary directory, with a current config."""
    manager = ConfigurationManager(str(tmp_path / "config"))
    manager.current_config = manager.create_default_config()
    return manager


@pytest_asyncio.fixture
async def fast_controller():
    """
    Controller with the shortest legal interval, for stepper tests.
    The stepper is stopped and awaited after each test.
    """
    ctrl = SegmentController(interval_ms=50)
    yield ctrl
    await ctrl.shutdown()
