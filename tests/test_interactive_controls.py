"""Tests for keyboard bindings and command mode of the interactive controller."""

from unittest.mock import MagicMock, patch

import pytest

from neonbit.interface.interactive_controls import KEY_LEFT, KEY_RIGHT, InteractiveController
from neonbit.interface.rich_dashboard import RichDashboard
from neonbit.interface.tone_notifier import ToneNotifier
from neonbit.modes import Mode


@pytest.fixture
def controls(controller, config_manager, tmp_path):
    dashboard = RichDashboard(controller, no_color=True)
    ctrl = InteractiveController(
        dashboard=dashboard,
        controller=controller,
        notifier=ToneNotifier(),
        config_manager=config_manager,
        export_dir=str(tmp_path / "exports"),
    )
    dashboard.set_interactive_controller(ctrl)
    return ctrl


async def type_command(controls, text):
    await controls.process_key(":")
    for ch in text:
        await controls.process_key(ch)
    await controls.process_key("\r")


class TestKeyBindings:
    @pytest.mark.asyncio
    async def test_tab_cycles_modes(self, controls, controller):
        await controls.process_key("\t")
        assert controller.mode is Mode.MANUAL
        await controls.process_key("\t")
        assert controller.mode is Mode.COUNTER
        await controls.process_key("\t")
        assert controller.mode is Mode.ANIMATION

    @pytest.mark.asyncio
    async def test_step_key(self, controls, controller):
        await controls.process_key("s")
        assert controller.value == 1

    @pytest.mark.asyncio
    async def test_segment_keys_in_manual(self, controls, controller):
        controller.select_mode(Mode.MANUAL)
        await controls.process_key("a")
        await controls.process_key("g")
        assert controller.pattern == "1000001"

    @pytest.mark.asyncio
    async def test_digit_and_arrow_keys_in_counter(self, controls, controller):
        controller.select_mode(Mode.COUNTER)
        await controls.process_key("7")
        assert controller.value == 7
        await controls.process_key(KEY_RIGHT)
        assert controller.value == 8
        await controls.process_key(KEY_LEFT)
        await controls.process_key(KEY_LEFT)
        assert controller.value == 6

    @pytest.mark.asyncio
    async def test_digit_key_ignored_in_animation(self, controls, controller):
        await controls.process_key("5")
        assert controller.value == 0

    @pytest.mark.asyncio
    async def test_interval_keys_clamp(self, controls, controller):
        controller.set_interval_ms(1000)
        await controls.process_key("+")
        assert controller.interval_ms == 1000
        await controls.process_key("-")
        assert controller.interval_ms == 950

    @pytest.mark.asyncio
    async def test_play_in_manual_reports(self, controls, controller):
        controller.select_mode(Mode.MANUAL)
        await controls.process_key("p")
        assert not controller.running
        assert "not available in manual mode" in controls.dashboard.event_log[-1]

    @pytest.mark.asyncio
    async def test_play_pause(self, controls, controller):
        await controls.process_key(" ")
        assert controller.running
        await controls.process_key("p")
        assert not controller.running

    @pytest.mark.asyncio
    async def test_export_key(self, controls, tmp_path):
        await controls.process_key("w")
        assert len(list((tmp_path / "exports").glob("neonbit-state-*.json"))) == 1

    @pytest.mark.asyncio
    async def test_sound_toggle(self, controls):
        await controls.process_key("x")
        assert controls.notifier.enabled is False

    @pytest.mark.asyncio
    async def test_help_toggle(self, controls):
        await controls.process_key("h")
        assert controls.show_help
        assert "Help" in controls.dashboard.render_text()

    @pytest.mark.asyncio
    async def test_unknown_key(self, controls):
        await controls.process_key("z")
        assert "Unknown key" in controls.dashboard.event_log[-1]

    @pytest.mark.asyncio
    async def test_quit_sends_sigint(self, controls):
        with patch("neonbit.interface.interactive_controls.os.kill") as mock_kill:
            await controls.process_key("q")
        mock_kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_save_config_key(self, controls, config_manager):
        await controls.process_key("k")
        assert config_manager.config_file.exists()


class TestCommandMode:
    @pytest.mark.asyncio
    async def test_mode_command(self, controls, controller):
        await type_command(controls, "mode counter")
        assert controller.mode is Mode.COUNTER
        assert not controls.command_mode

    @pytest.mark.asyncio
    async def test_bits_command(self, controls, controller):
        controller.select_mode(Mode.MANUAL)
        await type_command(controls, "bits 10xx1")
        assert controller.pattern == "1010000"

    @pytest.mark.asyncio
    async def test_bits_ignored_in_counter(self, controls, controller):
        controller.select_mode(Mode.COUNTER)
        await type_command(controls, "bits 1111111")
        assert controller.pattern == "1111110"
        assert "ignored" in controls.dashboard.event_log[-1]

    @pytest.mark.asyncio
    async def test_interval_command_out_of_range(self, controls, controller):
        await type_command(controls, "interval 5")
        assert controller.interval_ms == 250
        assert "Error executing command" in controls.dashboard.event_log[-1]

    @pytest.mark.asyncio
    async def test_digit_command_not_a_number(self, controls, controller):
        controller.select_mode(Mode.COUNTER)
        await type_command(controls, "digit seven")
        assert controller.value == 0
        assert "Error executing command" in controls.dashboard.event_log[-1]

    @pytest.mark.asyncio
    async def test_backspace_and_escape(self, controls):
        await controls.process_key(":")
        await controls.process_key("m")
        await controls.process_key("\x7f")
        assert controls.command_buffer == ""
        await controls.process_key("\x1b")
        assert not controls.command_mode

    @pytest.mark.asyncio
    async def test_save_and_load_profile(self, controls, controller, config_manager):
        config_manager.current_config.interval_ms = 800
        await type_command(controls, "save slow")
        assert "slow" in config_manager.list_profiles()

        controller.set_interval_ms(250)
        await type_command(controls, "profile slow")
        assert controller.interval_ms == 800

    @pytest.mark.asyncio
    async def test_param_without_live_config(self, controls):
        await type_command(controls, "param interval_ms 300")
        assert "not available" in controls.dashboard.event_log[-1]

    @pytest.mark.asyncio
    async def test_param_with_live_config(self, controls):
        controls.live_config = MagicMock()

        async def update_parameter(name, value):
            return True

        controls.live_config.update_parameter = update_parameter
        await type_command(controls, "param refresh_rate 100")
        assert "Updated refresh_rate = 100" in controls.dashboard.event_log[-1]

    def test_help_text_lists_bindings(self, controls):
        text = controls.get_help_text()
        assert "Tab: Cycle mode" in text
        assert "w: Write (export) state snapshot" in text
