"""
Rich console dashboard for the NeonBit simulator.

Shows the register (decimal value, bitstream, segment map), the run state,
the activity history strip, the digit truth table and a scrolling event log.
The dashboard only reads controller state; commands come in through the
interactive controller.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from rich.align import Align
from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .. import constants as const
from ..digit_table import truth_table
from ..modes import Mode
from ..register_model import EventKind, RegisterEvent

if TYPE_CHECKING:
    from ..controller import SegmentController
    from .interactive_controls import InteractiveController
    from .tone_notifier import ToneNotifier

SPARK_LEVELS = "▁▂▃▄▅▆▇█"

MODE_TITLES = {
    Mode.ANIMATION: "Sequence (0-127 Cycle)",
    Mode.MANUAL: "Logic Gates (Manual Edit)",
    Mode.COUNTER: "Digit Nav (0-9 Counter)",
}


def sparkline(samples: List[float]) -> str:
    """One block character per sample, scaled on the 0-127 axis."""
    top = len(SPARK_LEVELS) - 1
    chars = []
    for sample in samples:
        level = max(0.1, min(1.0, sample / const.MAX_REGISTER_VALUE))
        chars.append(SPARK_LEVELS[round(level * top)])
    return "".join(chars)


@dataclass
class DashboardState:
    """Current state of the dashboard display"""
    start_time: float
    refresh_rate_ms: int
    paused: bool = False
    show_labels: bool = True
    show_truth_table: bool = False


class RichDashboard:
    """
    Rich console dashboard for one display session.

    Register it as a controller listener so state changes show up in the
    event log: ``controller.add_listener(dashboard.on_event)``.
    """

    def __init__(
        self,
        controller: "SegmentController",
        notifier: Optional["ToneNotifier"] = None,
        refresh_rate_ms: int = 200,
        no_color: bool = False,
        show_labels: bool = True,
    ):
        self.controller = controller
        self.notifier = notifier
        self.console = Console(force_terminal=not no_color, no_color=no_color)
        self.state = DashboardState(
            start_time=time.time(),
            refresh_rate_ms=refresh_rate_ms,
            show_labels=show_labels,
        )
        self.interactive_controller: Optional["InteractiveController"] = None

        # Event log (circular buffer)
        self.event_log: List[str] = []
        self.max_log_entries = 50

    def _create_header(self) -> Panel:
        uptime = time.time() - self.state.start_time
        uptime_str = f"{int(uptime//3600):02d}:{int((uptime%3600)//60):02d}:{int(uptime%60):02d}"

        title_text = Text("NEON", style="bold white")
        title_text.append("BIT", style="bold magenta")
        title_text.append("  7-segment logic controller", style="dim")

        status_text = Text(f"Mode: {self.controller.mode.value}", style="bold cyan")
        status_text.append(f" | Uptime: {uptime_str}", style="dim")
        if self.state.paused:
            status_text.append(" | PAUSED", style="bold red")

        return Panel(
            Columns([Align.left(title_text), Align.right(status_text)], expand=True),
            title="Status",
            border_style="magenta",
        )

    def _create_register_panel(self) -> Panel:
        pattern = self.controller.pattern
        counter = self.controller.mode is Mode.COUNTER

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold cyan", width=16)
        table.add_column("Value")

        table.add_row("Digit Index:" if counter else "Register (Dec):", Text(str(self.controller.value), style="bold white"))

        bitstream = Text()
        for bit in pattern:
            bitstream.append(bit, style="bold green" if bit == "1" else "dim")
        table.add_row("Bitstream:", bitstream)
        if self.state.show_labels:
            table.add_row("", Text("".join(const.SEGMENT_LABELS), style="dim"))
        table.add_row("BIT_MAP:", Text("|".join(pattern), style="green"))
        table.add_row("Raw:", f"0x{self.controller.value:02X}")

        return Panel(table, title=MODE_TITLES[self.controller.mode], border_style="green")

    def _create_run_panel(self) -> Panel:
        run_state = self.controller.run_state

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold cyan", width=12)
        table.add_column("Value")

        if not self.controller.mode.is_timed:
            table.add_row("Scheduler:", Text("n/a in manual mode", style="dim"))
        elif run_state.running:
            table.add_row("Scheduler:", Text("RUNNING", style="bold green"))
        else:
            table.add_row("Scheduler:", Text("HALTED", style="bold red"))
        table.add_row("Scan:", f"{run_state.interval_ms}ms")

        sound = "on" if self.notifier is None or self.notifier.enabled else "muted"
        table.add_row("Sound:", sound)
        if self.notifier is not None and self.notifier.recent:
            cue = self.notifier.recent[-1]
            table.add_row("Last cue:", f"{cue.frequency_hz:.0f}Hz")

        return Panel(table, title="Run State", border_style="cyan")

    def _create_history_panel(self) -> Panel:
        samples = self.controller.get_history()
        body = Text(sparkline(samples) or "No samples yet...", style="magenta")
        return Panel(
            body,
            title=f"Signal History ({len(samples)}/{self.controller.history.capacity})",
            border_style="magenta",
        )

    def _create_truth_table_panel(self) -> Panel:
        table = Table(header_style="bold magenta")
        table.add_column("Digit", style="bold white")
        table.add_column("Binary (abcdefg)", style="green")
        table.add_column("Raw", justify="right", style="dim")
        for row in truth_table():
            table.add_row(str(row["digit"]), row["binary"], row["raw"])
        return Panel(table, title="Logic Truth Table (0-9)", border_style="yellow")

    def _create_event_log_panel(self) -> Panel:
        log_text = Text()
        recent_entries = self.event_log[-10:]

        for entry in recent_entries:
            log_text.append(entry + "\n", style="dim")

        if not recent_entries:
            log_text.append("No events yet...", style="dim italic")

        return Panel(log_text, title="Event Log", border_style="white")

    def _create_footer(self) -> Panel:
        controller = self.interactive_controller
        if controller is not None and controller.show_help:
            help_text = Text(controller.get_help_text(), style="dim")
            return Panel(help_text, title="Help (press 'h' to hide)", border_style="yellow")

        if controller is not None and controller.command_mode:
            prompt_text = Text()
            prompt_text.append("Command: ", style="bold yellow")
            prompt_text.append(controller.command_buffer, style="white")
            prompt_text.append("█", style="yellow")
            return Panel(prompt_text, title="Command Mode (ESC to cancel)", border_style="yellow")

        controls = Text()
        controls.append("Controls: ", style="bold")
        controls.append("[TAB] Mode  ", style="cyan")
        if self.controller.mode is Mode.MANUAL:
            controls.append("[A-G] Toggle  ", style="cyan")
        else:
            controls.append("[P] Play  [S] Step  [+/-] Scan  ", style="cyan")
        if self.controller.mode is Mode.COUNTER:
            controls.append("[←→] Nav  [0-9] Digit  ", style="cyan")
        controls.append("[R] Reset  [W] Export  [T] Table  [:] Cmd  [H] Help  [Q] Quit", style="cyan")

        return Panel(Align.center(controls), border_style="blue")

    def render(self) -> Group:
        """Builds the full dashboard as one renderable."""
        parts = [
            self._create_header(),
            Columns([self._create_register_panel(), self._create_run_panel()], expand=True),
            self._create_history_panel(),
        ]
        if self.state.show_truth_table:
            parts.append(self._create_truth_table_panel())
        parts.extend([self._create_event_log_panel(), self._create_footer()])
        return Group(*parts)

    def render_text(self) -> str:
        with self.console.capture() as capture:
            self.console.print(self.render())
        return capture.get()

    def add_event(self, message: str):
        """Add an event to the log"""
        timestamp = time.strftime("%H:%M:%S")
        self.event_log.append(f"[{timestamp}] {message}")

        if len(self.event_log) > self.max_log_entries:
            self.event_log.pop(0)

    def on_event(self, event: RegisterEvent):
        """Controller listener: logs every change except routine steps."""
        if event.kind is EventKind.STEP:
            return
        if event.kind is EventKind.RUN_STATE:
            message = "Running" if event.detail.get("running") else "Halted"
        elif event.kind is EventKind.EXPORT:
            message = f"Exported {event.detail.get('path')}"
        elif event.kind is EventKind.MODE_CHANGE:
            message = f"Mode {event.mode.value}"
        else:
            message = f"{event.kind.value}: {event.pattern} ({event.value})"
        self.add_event(message)

    async def run(self):
        """Run the dashboard with simple ANSI positioning"""
        self.add_event("Dashboard started")

        print("\033[?25l", end="")  # Hide cursor
        print("\033[2J", end="")    # Clear screen

        try:
            while True:
                if not self.state.paused:
                    print("\033[H", end="")
                    print(self.render_text(), end="")
                await asyncio.sleep(self.state.refresh_rate_ms / 1000.0)
        finally:
            print("\033[?25h", end="")  # Restore cursor

    def toggle_pause(self):
        self.state.paused = not self.state.paused
        status = "paused" if self.state.paused else "resumed"
        self.add_event(f"Dashboard {status}")

    def toggle_truth_table(self):
        self.state.show_truth_table = not self.state.show_truth_table

    def toggle_labels(self):
        self.state.show_labels = not self.state.show_labels

    def set_refresh_rate(self, rate_ms: int):
        """Set the dashboard refresh rate"""
        self.state.refresh_rate_ms = max(50, min(2000, rate_ms))
        self.add_event(f"Refresh rate set to {self.state.refresh_rate_ms}ms")

    def set_interactive_controller(self, controller: "InteractiveController"):
        self.interactive_controller = controller
