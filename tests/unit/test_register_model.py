"""Unit tests for the mode-gated register model.

Each operation is checked in the modes that allow it, in the modes that
ignore it, and with strict mode where ignored operations raise.
"""

import pytest

from neonbit import constants as const
from neonbit.digit_table import lookup, to_value
from neonbit.exceptions import IllegalOperationForMode, OutOfRangeError
from neonbit.modes import AnimationRegister, CounterRegister, ManualRegister, Mode
from neonbit.register_model import EventKind, RegisterModel


def assert_register_consistent(model):
    if model.mode is Mode.COUNTER:
        assert model.pattern == lookup(model.value)
    else:
        assert model.value == to_value(model.pattern)


class TestSelectModeAndReset:
    def test_initial_state(self):
        model = RegisterModel()
        assert model.mode is Mode.ANIMATION
        assert (model.pattern, model.value) == ("0000000", 0)

    def test_select_mode_resets_register(self):
        model = RegisterModel()
        model.step()
        event = model.select_mode(Mode.COUNTER)
        assert event.kind is EventKind.MODE_CHANGE
        assert (model.pattern, model.value) == ("1111110", 0)
        assert event.detail["previous_mode"] == "ANIMATION"
        assert isinstance(model.register, CounterRegister)

    def test_select_same_mode_still_resets(self):
        model = RegisterModel(Mode.MANUAL)
        model.toggle_bit(0)
        model.select_mode(Mode.MANUAL)
        assert model.pattern == "0000000"

    def test_select_mode_accepts_names(self):
        model = RegisterModel()
        model.select_mode("manual")
        assert model.mode is Mode.MANUAL

    def test_reset_keeps_mode(self):
        model = RegisterModel(Mode.COUNTER)
        model.select_digit(6)
        event = model.reset()
        assert event.kind is EventKind.RESET
        assert event.previous_value == 6
        assert model.mode is Mode.COUNTER
        assert model.value == 0


class TestToggleBit:
    def test_toggle_first_segment(self):
        model = RegisterModel(Mode.MANUAL)
        event = model.toggle_bit(0)
        assert model.pattern == "1000000"
        assert model.value == 64
        assert event.detail == {"index": 0, "segment": "a"}

    def test_double_toggle_restores(self):
        model = RegisterModel(Mode.MANUAL)
        model.toggle_bit(6)
        model.toggle_bit(6)
        assert model.pattern == "0000000"

    @pytest.mark.parametrize("index", [-1, 7, 100])
    def test_out_of_range_index(self, index):
        model = RegisterModel(Mode.MANUAL)
        with pytest.raises(OutOfRangeError):
            model.toggle_bit(index)

    def test_out_of_range_index_in_other_mode(self):
        # argument validation runs before the mode gate
        model = RegisterModel(Mode.COUNTER)
        with pytest.raises(OutOfRangeError):
            model.toggle_bit(7)

    @pytest.mark.parametrize("mode", [Mode.ANIMATION, Mode.COUNTER])
    def test_ignored_outside_manual(self, mode):
        model = RegisterModel(mode)
        before = model.register
        assert model.toggle_bit(0) is None
        assert model.register == before

    def test_strict_raises(self):
        model = RegisterModel(Mode.ANIMATION, strict=True)
        with pytest.raises(IllegalOperationForMode) as excinfo:
            model.toggle_bit(0)
        assert excinfo.value.operation == "toggle_bit"
        assert excinfo.value.mode is Mode.ANIMATION


class TestSetPatternFromText:
    def test_manual_text(self):
        model = RegisterModel(Mode.MANUAL)
        event = model.set_pattern_from_text("10xx1")
        assert model.pattern == "1010000"
        assert model.value == 80
        assert event.kind is EventKind.TEXT_INPUT
        assert event.detail == {"raw": "10xx1"}

    def test_animation_text_keeps_animation_register(self):
        model = RegisterModel(Mode.ANIMATION)
        model.set_pattern_from_text("1111111")
        assert isinstance(model.register, AnimationRegister)
        assert model.value == 127
        # next step wraps from the loaded value
        model.step()
        assert model.value == 0

    def test_ignored_in_counter(self):
        model = RegisterModel(Mode.COUNTER)
        assert model.set_pattern_from_text("1111111") is None
        assert model.pattern == "1111110"

    def test_empty_text(self):
        model = RegisterModel(Mode.MANUAL)
        model.toggle_bit(0)
        model.set_pattern_from_text("")
        assert model.pattern == "0000000"


class TestStep:
    def test_first_animation_step(self):
        model = RegisterModel()
        event = model.step()
        assert (model.value, model.pattern) == (1, "0000001")
        assert event.kind is EventKind.STEP
        assert event.previous_value == 0

    def test_animation_wraps_after_128_steps(self):
        model = RegisterModel()
        for _ in range(const.ANIMATION_MODULUS - 1):
            model.step()
        assert model.value == 127
        model.step()
        assert (model.value, model.pattern) == (0, "0000000")

    def test_counter_full_cycle(self):
        model = RegisterModel(Mode.COUNTER)
        seen = []
        for _ in range(const.COUNTER_MODULUS):
            model.step()
            seen.append(model.value)
            assert_register_consistent(model)
        assert seen == [1, 2, 3, 4, 5, 6, 7, 8, 9, 0]

    def test_ignored_in_manual(self):
        model = RegisterModel(Mode.MANUAL)
        assert model.step() is None

    def test_invariant_holds_across_steps(self):
        model = RegisterModel()
        for _ in range(200):
            model.step()
            assert_register_consistent(model)


class TestNavigateAndSelectDigit:
    def test_navigate_back_wraps(self):
        model = RegisterModel(Mode.COUNTER)
        event = model.navigate(-1)
        assert model.value == 9
        assert model.pattern == "1111011"
        assert event.detail == {"direction": -1}

    def test_navigate_forward_wraps(self):
        model = RegisterModel(Mode.COUNTER)
        model.select_digit(9)
        model.navigate(1)
        assert model.value == 0

    @pytest.mark.parametrize("direction", [0, 2, -2])
    def test_invalid_direction(self, direction):
        model = RegisterModel(Mode.COUNTER)
        with pytest.raises(OutOfRangeError):
            model.navigate(direction)

    def test_navigate_ignored_outside_counter(self):
        assert RegisterModel(Mode.ANIMATION).navigate(1) is None

    def test_select_digit(self):
        model = RegisterModel(Mode.COUNTER)
        event = model.select_digit(4)
        assert (model.value, model.pattern) == (4, "0110011")
        assert event.kind is EventKind.SELECT_DIGIT

    def test_select_digit_out_of_range(self):
        model = RegisterModel(Mode.COUNTER)
        with pytest.raises(OutOfRangeError):
            model.select_digit(10)
        assert model.value == 0

    def test_select_digit_ignored_in_manual(self):
        model = RegisterModel(Mode.MANUAL)
        assert model.select_digit(3) is None
        assert isinstance(model.register, ManualRegister)


class TestRegisterEvent:
    def test_as_dict(self):
        model = RegisterModel(Mode.COUNTER)
        data = model.select_digit(2).as_dict()
        assert data["kind"] == "select_digit"
        assert data["mode"] == "COUNTER"
        assert data["pattern"] == "1101101"
        assert data["previous_value"] == 0
        assert isinstance(data["timestamp"], float)

    def test_changes_register(self):
        model = RegisterModel()
        assert model.step().changes_register
