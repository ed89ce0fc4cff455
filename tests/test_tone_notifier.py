"""Tests for the tone-cue notifier."""

from unittest.mock import MagicMock

import pytest

from neonbit.interface.tone_notifier import ToneCue, ToneNotifier, cue_for_event
from neonbit.modes import Mode
from neonbit.register_model import EventKind, RegisterEvent


def make_event(kind, mode=Mode.ANIMATION, value=0, **detail):
    return RegisterEvent(kind=kind, mode=mode, value=value, pattern="0000000", detail=detail)


class TestCueMapping:
    @pytest.mark.parametrize(
        "event, frequency, duration",
        [
            (make_event(EventKind.STEP, value=10), 480, 0.05),
            (make_event(EventKind.STEP, Mode.COUNTER, value=3), 940, 0.05),
            (make_event(EventKind.TOGGLE_BIT, Mode.MANUAL), 660, 0.05),
            (make_event(EventKind.MODE_CHANGE), 1200, 0.1),
            (make_event(EventKind.NAVIGATE, Mode.COUNTER, direction=1), 1000, 0.05),
            (make_event(EventKind.NAVIGATE, Mode.COUNTER, direction=-1), 800, 0.05),
            (make_event(EventKind.RESET), 200, 0.2),
            (make_event(EventKind.SELECT_DIGIT, Mode.COUNTER, value=4), 600, 0.05),
            (make_event(EventKind.RUN_STATE, running=True), 800, 0.1),
            (make_event(EventKind.RUN_STATE, running=False), 200, 0.1),
            (make_event(EventKind.EXPORT, path="x"), 1500, 0.1),
        ],
    )
    def test_cue_for_event(self, event, frequency, duration):
        cue = cue_for_event(event)
        assert cue.frequency_hz == frequency
        assert cue.duration_s == duration
        assert cue.kind == event.kind.value

    def test_text_input_is_silent(self):
        assert cue_for_event(make_event(EventKind.TEXT_INPUT, Mode.MANUAL)) is None


class TestToneNotifier:
    def test_sink_receives_cues(self):
        sink = MagicMock()
        notifier = ToneNotifier(sink=sink)
        cue = notifier(make_event(EventKind.TOGGLE_BIT, Mode.MANUAL))
        sink.assert_called_once_with(cue)
        assert notifier.recent_cues() == [cue]

    def test_muted_notifier_emits_nothing(self):
        sink = MagicMock()
        notifier = ToneNotifier(sink=sink, enabled=False)
        assert notifier.handle(make_event(EventKind.RESET)) is None
        sink.assert_not_called()
        assert notifier.recent_cues() == []

    def test_toggle(self, notifier):
        assert notifier.toggle() is False
        assert notifier.toggle() is True

    def test_recent_log_is_bounded(self):
        notifier = ToneNotifier(max_recent=3)
        for _ in range(5):
            notifier.handle(make_event(EventKind.RESET))
        assert len(notifier.recent_cues()) == 3

    def test_as_controller_listener(self, controller, notifier):
        controller.add_listener(notifier)
        controller.step()
        controller.select_mode(Mode.COUNTER)
        controller.navigate(-1)
        assert [c.frequency_hz for c in notifier.recent_cues()] == [444, 1200, 800]

    def test_cue_as_dict(self):
        assert ToneCue(660, kind="toggle_bit").as_dict() == {
            "frequency_hz": 660,
            "duration_s": 0.05,
            "kind": "toggle_bit",
        }
