"""Unit tests for the asyncio stepper.

Timing assertions use generous margins: they only check that ticks happen
while running and never happen after a stop.
"""

import asyncio

import pytest

from neonbit.exceptions import OutOfRangeError
from neonbit.stepper import RunState, Stepper, validate_interval_ms


async def wait_for_ticks(stepper, count, timeout=2.0):
    async def _poll():
        while stepper.tick_count < count:
            await asyncio.sleep(0.01)
    await asyncio.wait_for(_poll(), timeout)


class TestIntervalValidation:
    @pytest.mark.parametrize("interval", [50, 250, 1000])
    def test_valid(self, interval):
        assert validate_interval_ms(interval) == interval

    @pytest.mark.parametrize("interval", [0, 49, 1001, -250, True, 250.0])
    def test_invalid(self, interval):
        with pytest.raises(OutOfRangeError):
            validate_interval_ms(interval)

    def test_constructor_validates(self):
        with pytest.raises(OutOfRangeError):
            Stepper(lambda: None, interval_ms=10)

    def test_run_state_defaults(self):
        assert RunState().as_dict() == {"running": False, "interval_ms": 250}


class TestStepperLifecycle:
    def test_start_needs_running_loop(self):
        stepper = Stepper(lambda: None)
        with pytest.raises(RuntimeError):
            stepper.start()
        assert not stepper.running

    def test_stop_when_idle_is_noop(self):
        stepper = Stepper(lambda: None)
        stepper.stop()
        assert not stepper.running

    @pytest.mark.asyncio
    async def test_ticks_while_running(self):
        ticks = []
        stepper = Stepper(lambda: ticks.append(1), interval_ms=50)
        stepper.start()
        assert stepper.running
        await wait_for_ticks(stepper, 3)
        await stepper.wait_stopped()
        assert len(ticks) >= 3

    @pytest.mark.asyncio
    async def test_no_tick_after_stop(self):
        ticks = []
        stepper = Stepper(lambda: ticks.append(1), interval_ms=50)
        stepper.start()
        await wait_for_ticks(stepper, 1)
        stepper.stop()
        count = len(ticks)
        await asyncio.sleep(0.2)
        assert len(ticks) == count
        assert not stepper.running

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_task(self):
        stepper = Stepper(lambda: None, interval_ms=50)
        stepper.start()
        task = stepper._task
        stepper.start()
        assert stepper._task is task
        await stepper.wait_stopped()

    @pytest.mark.asyncio
    async def test_restart_after_stop(self):
        stepper = Stepper(lambda: None, interval_ms=50)
        stepper.start()
        stepper.stop()
        stepper.start()
        await wait_for_ticks(stepper, 1)
        await stepper.wait_stopped()
        assert stepper.tick_count >= 1

    @pytest.mark.asyncio
    async def test_interval_change_while_running(self):
        stepper = Stepper(lambda: None, interval_ms=1000)
        stepper.start()
        stepper.set_interval_ms(50)
        assert stepper.interval_ms == 50
        assert stepper.running
        await stepper.wait_stopped()

    @pytest.mark.asyncio
    async def test_new_interval_applies_without_restart(self):
        stepper = Stepper(lambda: None, interval_ms=1000)
        stepper.start()
        task = stepper._task
        # let the first 1000ms sleep begin before shortening the interval
        await asyncio.sleep(0.05)
        stepper.set_interval_ms(50)
        await asyncio.sleep(1.3)
        # one tick at ~1.0s, then 50ms ticks; at 1000ms there would be one
        assert stepper.tick_count >= 3
        assert stepper._task is task
        await stepper.wait_stopped()

    @pytest.mark.asyncio
    async def test_failing_tick_halts_and_reports(self):
        halts = []

        def boom():
            raise RuntimeError("tick failed")

        stepper = Stepper(boom, interval_ms=50, on_halt=halts.append)
        stepper.start()
        task = stepper._task
        await asyncio.wait_for(task, 2.0)
        assert not stepper.running
        assert stepper.tick_count == 1
        assert len(halts) == 1
        assert str(halts[0]) == "tick failed"
        # the halted stepper can be started again
        stepper.start()
        assert stepper.running
        await stepper.wait_stopped()
