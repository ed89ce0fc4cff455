"""Tests for the Rich console dashboard rendering."""

import pytest

from neonbit.interface.rich_dashboard import RichDashboard, sparkline
from neonbit.interface.tone_notifier import ToneNotifier
from neonbit.modes import Mode


@pytest.fixture
def dashboard(controller):
    dash = RichDashboard(controller, notifier=ToneNotifier(), no_color=True)
    controller.add_listener(dash.on_event)
    return dash


class TestSparkline:
    def test_levels(self):
        assert sparkline([127.0, 63.5, 0.0]) == "█▅▂"

    def test_empty(self):
        assert sparkline([]) == ""


class TestRichDashboard:
    def test_render_register(self, dashboard, controller):
        controller.set_pattern_from_text("1010000")
        text = dashboard.render_text()
        assert "Sequence (0-127 Cycle)" in text
        assert "1|0|1|0|0|0|0" in text
        assert "0x50" in text
        assert "HALTED" in text

    def test_render_counter_mode(self, dashboard, controller):
        controller.select_mode(Mode.COUNTER)
        text = dashboard.render_text()
        assert "Digit Nav (0-9 Counter)" in text
        assert "Digit Index:" in text

    def test_manual_mode_has_no_scheduler(self, dashboard, controller):
        controller.select_mode(Mode.MANUAL)
        assert "n/a in manual mode" in dashboard.render_text()

    def test_truth_table_toggle(self, dashboard):
        assert "Logic Truth Table" not in dashboard.render_text()
        dashboard.toggle_truth_table()
        assert "Logic Truth Table" in dashboard.render_text()

    def test_labels_toggle(self, dashboard):
        assert "abcdefg" in dashboard.render_text()
        dashboard.toggle_labels()
        assert "abcdefg" not in dashboard.render_text()

    def test_event_log_skips_steps(self, dashboard, controller):
        controller.step()
        controller.select_mode(Mode.COUNTER)
        assert len(dashboard.event_log) == 1
        assert "Mode COUNTER" in dashboard.event_log[0]

    def test_event_log_is_bounded(self, dashboard):
        for i in range(60):
            dashboard.add_event(f"event {i}")
        assert len(dashboard.event_log) == dashboard.max_log_entries
        assert dashboard.event_log[-1].endswith("event 59")

    def test_refresh_rate_is_clamped(self, dashboard):
        dashboard.set_refresh_rate(5)
        assert dashboard.state.refresh_rate_ms == 50
        dashboard.set_refresh_rate(10000)
        assert dashboard.state.refresh_rate_ms == 2000

    def test_history_title(self, dashboard, controller):
        controller.step()
        assert "Signal History (2/40)" in dashboard.render_text()
