"""
Interactive controls for the Rich dashboard.

Handles keyboard input and turns key presses into controller commands.
"""

import asyncio
import logging
import os
import select
import signal
import sys
import termios
import tty
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .. import constants as const
from ..exceptions import NeonBitError
from ..exporter import export_state
from ..modes import Mode

if TYPE_CHECKING:
    from ..controller import SegmentController
    from .config_manager import ConfigurationManager, LiveConfigurationInterface
    from .rich_dashboard import RichDashboard
    from .tone_notifier import ToneNotifier

logger = logging.getLogger(__name__)

MODE_CYCLE = [Mode.ANIMATION, Mode.MANUAL, Mode.COUNTER]

KEY_LEFT = "\x1b[D"
KEY_RIGHT = "\x1b[C"


@dataclass
class KeyBinding:
    """Represents a key binding and its associated action"""
    key: str
    description: str
    action: Callable
    category: str = "general"


class InteractiveController:
    """
    Handles keyboard input and interactive controls for the dashboard.

    Features:
    - Non-blocking keyboard input
    - Key bindings for every controller command
    - Command mode (':') for commands that take an argument
    - Help system
    """

    def __init__(
        self,
        dashboard: "RichDashboard",
        controller: "SegmentController",
        notifier: Optional["ToneNotifier"] = None,
        config_manager: Optional["ConfigurationManager"] = None,
        live_config: Optional["LiveConfigurationInterface"] = None,
        export_dir: str = ".",
    ):
        self.dashboard = dashboard
        self.controller = controller
        self.notifier = notifier
        self.config_manager = config_manager
        self.live_config = live_config
        self.export_dir = export_dir
        self.running = False
        self.original_tty_settings = None

        self.show_help = False
        self.command_mode = False
        self.command_buffer = ""

        self.key_bindings: Dict[str, KeyBinding] = {}
        self._setup_key_bindings()

    def _bind(self, key: str, description: str, action: Callable, category: str, label: Optional[str] = None):
        self.key_bindings[key] = KeyBinding(
            key=label or key, description=description, action=action, category=category
        )

    def _setup_key_bindings(self):
        """Configure all key bindings"""
        self._bind("\t", "Cycle mode (animation/manual/counter)", self._cycle_mode, "mode", label="Tab")
        self._bind("r", "Reset register", self._reset, "mode")
        self._bind("p", "Play/Pause automatic stepping", self._toggle_running, "run")
        self._bind(" ", "Play/Pause automatic stepping", self._toggle_running, "run", label="Space")
        self._bind("s", "Single step", self._step, "run")
        self._bind("+", "Slower scan (+50ms)", self._slower, "run")
        self._bind("-", "Faster scan (-50ms)", self._faster, "run")
        self._bind(KEY_LEFT, "Previous digit (counter)", self._previous_digit, "counter", label="←")
        self._bind(KEY_RIGHT, "Next digit (counter)", self._next_digit, "counter", label="→")

        for index, label in enumerate(const.SEGMENT_LABELS):
            self._bind(
                label,
                f"Toggle segment {label} (manual)",
                lambda index=index: self.controller.toggle_bit(index),
                "manual",
            )
        for digit in range(const.COUNTER_MODULUS):
            self._bind(
                str(digit),
                f"Show digit {digit} (counter)",
                lambda digit=digit: self.controller.select_digit(digit),
                "counter",
            )

        self._bind("x", "Mute/Unmute tone cues", self._toggle_sound, "dashboard")
        self._bind("t", "Show/Hide truth table", self.dashboard.toggle_truth_table, "dashboard")
        self._bind("l", "Show/Hide segment labels", self.dashboard.toggle_labels, "dashboard")
        self._bind("w", "Write (export) state snapshot", self._export, "dashboard")
        self._bind("k", "Save current configuration", self._save_config, "dashboard")
        self._bind(":", "Enter command mode", self._enter_command_mode, "dashboard")
        self._bind("h", "Show/Hide help", self._toggle_help, "dashboard")
        self._bind("q", "Quit simulator", self._quit_simulator, "dashboard")

    def _setup_terminal(self):
        """Configure terminal for non-blocking input"""
        if sys.stdin.isatty():
            self.original_tty_settings = termios.tcgetattr(sys.stdin.fileno())
            tty.setcbreak(sys.stdin.fileno())

    def _restore_terminal(self):
        if self.original_tty_settings and sys.stdin.isatty():
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self.original_tty_settings)

    async def _get_key_async(self) -> Optional[str]:
        """Get a key press without blocking"""
        if not sys.stdin.isatty():
            return None

        if select.select([sys.stdin], [], [], 0) == ([], [], []):
            return None

        try:
            key = sys.stdin.read(1)
            # Arrow keys arrive as 3-byte escape sequences
            if key == "\x1b" and select.select([sys.stdin], [], [], 0.01)[0]:
                key += sys.stdin.read(2)
            return key
        except OSError:
            return None

    # Key action handlers
    def _cycle_mode(self):
        current = MODE_CYCLE.index(self.controller.mode)
        self.controller.select_mode(MODE_CYCLE[(current + 1) % len(MODE_CYCLE)])

    def _reset(self):
        self.controller.reset()

    def _toggle_running(self):
        if self.controller.toggle_running() is None and self.controller.mode is Mode.MANUAL:
            self.dashboard.add_event("Scheduler is not available in manual mode")

    def _step(self):
        self.controller.step()

    def _change_interval(self, delta: int):
        new_interval = max(
            const.MIN_INTERVAL_MS,
            min(const.MAX_INTERVAL_MS, self.controller.interval_ms + delta),
        )
        self.controller.set_interval_ms(new_interval)
        self.dashboard.add_event(f"Scan interval {new_interval}ms")

    def _slower(self):
        self._change_interval(const.INTERVAL_STEP_MS)

    def _faster(self):
        self._change_interval(-const.INTERVAL_STEP_MS)

    def _previous_digit(self):
        self.controller.navigate(const.DIRECTION_PREVIOUS)

    def _next_digit(self):
        self.controller.navigate(const.DIRECTION_NEXT)

    def _toggle_sound(self):
        if self.notifier is None:
            self.dashboard.add_event("Tone notifier not available")
            return
        enabled = self.notifier.toggle()
        self.dashboard.add_event(f"Sound {'on' if enabled else 'muted'}")

    def _export(self):
        export_state(self.controller, self.export_dir)

    def _save_config(self):
        if not self.config_manager or not self.config_manager.current_config:
            self.dashboard.add_event("No current configuration to save")
            return
        if self.config_manager.save_config(self.config_manager.current_config):
            self.dashboard.add_event("Configuration saved successfully")
        else:
            self.dashboard.add_event("Failed to save configuration")

    def _enter_command_mode(self):
        self.command_mode = True
        self.command_buffer = ""

    def _toggle_help(self):
        self.show_help = not self.show_help

    def _quit_simulator(self):
        self.dashboard.add_event("Quit requested")
        self.running = False
        os.kill(os.getpid(), signal.SIGINT)

    def get_help_text(self) -> str:
        """Generate help text for display"""
        help_lines: List[str] = ["Interactive Controls Help:", ""]

        categories = {
            "mode": "Mode",
            "run": "Scheduler",
            "manual": "Manual Edit",
            "counter": "Digit Counter",
            "dashboard": "Dashboard",
        }
        for category, title in categories.items():
            help_lines.append(f"{title}:")
            for binding in self.key_bindings.values():
                if binding.category == category:
                    help_lines.append(f"  {binding.key}: {binding.description}")
            help_lines.append("")

        help_lines.extend([
            "Command Mode (':'):",
            "  mode <animation|manual|counter>",
            "  bits <0/1 text>      - load a bit pattern",
            "  digit <0-9>          - show a digit (counter)",
            "  interval <50-1000>   - scan interval in ms",
            "  param <name> <value> - adjust a live parameter",
            "  profile <name> / save <name>",
            "  export",
        ])
        return "\n".join(help_lines)

    async def process_key(self, key: str):
        """Handle a single key press."""
        if self.command_mode:
            if key in ("\r", "\n"):
                command = self.command_buffer
                self.command_mode = False
                self.command_buffer = ""
                await self._process_command(command)
            elif key == "\x1b":
                self.command_mode = False
                self.command_buffer = ""
                self.dashboard.add_event("Command mode cancelled")
            elif key == "\x7f":
                self.command_buffer = self.command_buffer[:-1]
            elif key.isprintable():
                self.command_buffer += key
            return

        binding = self.key_bindings.get(key)
        if binding is None:
            if key.isprintable():
                self.dashboard.add_event(f"Unknown key: '{key}'")
            return

        try:
            binding.action()
        except NeonBitError as e:
            logger.warning(f"Key '{binding.key}' failed: {e}")
            self.dashboard.add_event(f"Error executing command: {e}")

    async def handle_input(self):
        """Main input handling loop"""
        while self.running:
            key = await self._get_key_async()
            if key is None:
                await asyncio.sleep(0.01)
                continue
            await self.process_key(key)

    async def _process_command(self, command: str):
        """Process a command entered in command mode"""
        parts = command.strip().split()
        if not parts:
            return

        cmd = parts[0].lower()
        args = parts[1:]

        try:
            if cmd == "mode" and args:
                self.controller.select_mode(args[0])
            elif cmd == "bits" and args:
                if self.controller.set_pattern_from_text("".join(args)) is None:
                    self.dashboard.add_event(f"Bit input ignored in {self.controller.mode.value} mode")
            elif cmd == "digit" and args:
                self.controller.select_digit(int(args[0]))
            elif cmd == "interval" and args:
                self.controller.set_interval_ms(int(args[0]))
                self.dashboard.add_event(f"Scan interval {self.controller.interval_ms}ms")
            elif cmd == "export":
                self._export()
            elif cmd == "param" and len(args) >= 2:
                await self._adjust_parameter(args[0], args[1])
            elif cmd == "profile" and args:
                self._load_profile(args[0])
            elif cmd == "save" and args:
                self._save_profile(args[0])
            elif cmd == "help":
                self.show_help = True
            else:
                self.dashboard.add_event(f"Unknown command: {command}")
        except (NeonBitError, ValueError) as e:
            self.dashboard.add_event(f"Error executing command: {e}")

    async def _adjust_parameter(self, param_name: str, param_value: str):
        if not self.live_config:
            self.dashboard.add_event("Live configuration not available")
            return

        if await self.live_config.update_parameter(param_name, param_value):
            self.dashboard.add_event(f"Updated {param_name} = {param_value}")
        else:
            self.dashboard.add_event(f"Failed to update {param_name}")

    def _load_profile(self, profile_name: str):
        if not self.config_manager:
            self.dashboard.add_event("Configuration manager not available")
            return

        config = self.config_manager.load_config(profile_name)
        if not config:
            self.dashboard.add_event(f"Failed to load profile '{profile_name}'")
            return

        self.config_manager.current_config = config
        self.controller.set_interval_ms(config.interval_ms)
        self.controller.clear_history_on_mode_change = config.clear_history_on_mode_change
        if self.notifier is not None:
            self.notifier.set_enabled(config.sound_enabled)
        self.dashboard.add_event(f"Loaded profile '{profile_name}'")

    def _save_profile(self, profile_name: str):
        if not self.config_manager or not self.config_manager.current_config:
            self.dashboard.add_event("No current configuration to save")
            return

        if self.config_manager.save_config(self.config_manager.current_config, profile_name):
            self.dashboard.add_event(f"Saved profile '{profile_name}'")
        else:
            self.dashboard.add_event(f"Failed to save profile '{profile_name}'")

    async def start(self):
        """Start the interactive controller"""
        self.running = True
        self._setup_terminal()
        self.dashboard.add_event("Interactive controls started (press 'h' for help)")

        try:
            await self.handle_input()
        finally:
            self._restore_terminal()

    def stop(self):
        self.running = False
