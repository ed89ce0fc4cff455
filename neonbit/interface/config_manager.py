"""
Configuration Management System for the NeonBit simulator.

This module provides:
- Configuration profiles (save/load different simulator setups)
- Live parameter adjustment of a running session
- Validation of the adjustable parameters
"""

import asyncio
import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from .. import constants as const
from ..exceptions import ConfigurationError
from ..modes import Mode

if TYPE_CHECKING:
    from ..controller import SegmentController
    from .rich_dashboard import RichDashboard
    from .tone_notifier import ToneNotifier

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    """Main simulator configuration."""
    # Display behaviour
    initial_mode: str = Mode.ANIMATION.value
    interval_ms: int = const.DEFAULT_INTERVAL_MS
    autostart: bool = False
    sound_enabled: bool = True
    show_labels: bool = True
    clear_history_on_mode_change: bool = False

    # HTTP API
    api_host: str = "127.0.0.1"
    api_port: int = 8765

    # Interface settings
    refresh_rate: int = 200
    no_color: bool = False
    log_level: str = "INFO"
    export_dir: str = "."

    # Feature flags
    json_output: bool = False
    api: bool = False
    dashboard: bool = False

    # Metadata
    name: str = "default"
    description: str = "Default simulator configuration"
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    modified_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulatorConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {sorted(unknown)}")
        config = cls(**{k: v for k, v in data.items() if k in known})
        config.validate()
        return config

    def validate(self):
        """Raises ConfigurationError if a value is outside its domain."""
        try:
            Mode.parse(self.initial_mode)
        except ValueError as e:
            raise ConfigurationError(f"Invalid initial_mode: {e}") from e
        if not const.MIN_INTERVAL_MS <= self.interval_ms <= const.MAX_INTERVAL_MS:
            raise ConfigurationError(
                f"interval_ms must be between {const.MIN_INTERVAL_MS} and {const.MAX_INTERVAL_MS}",
                value=self.interval_ms,
            )
        if not 50 <= self.refresh_rate <= 2000:
            raise ConfigurationError(
                "refresh_rate must be between 50 and 2000", value=self.refresh_rate
            )


class ConfigurationManager:
    """Manages simulator configuration with live updates and profiles."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_dir: Directory to store configuration files. Defaults to ~/.neonbit_simulator_config
        """
        if config_dir is None:
            config_dir = os.path.expanduser("~/.neonbit_simulator_config")

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.profiles_dir = self.config_dir / "profiles"
        self.profiles_dir.mkdir(exist_ok=True)

        self.current_config: Optional[SimulatorConfig] = None
        self.config_file = self.config_dir / "current_config.json"

        # Live update callbacks
        self._update_callbacks: List[Callable] = []

        logger.info(f"Configuration manager initialized with config dir: {self.config_dir}")

    def add_update_callback(self, callback: Callable):
        """Add callback to be called when configuration is updated live."""
        self._update_callbacks.append(callback)

    def remove_update_callback(self, callback: Callable):
        if callback in self._update_callbacks:
            self._update_callbacks.remove(callback)

    async def _notify_update_callbacks(self, config_change: Dict[str, Any]):
        """Notify all callbacks of configuration changes."""
        for callback in self._update_callbacks:
            try:
                if asyncio.iscoroutinefunction(callback):
                    await callback(config_change)
                else:
                    callback(config_change)
            except Exception as e:
                logger.error(f"Error in config update callback: {e}")

    def create_default_config(self) -> SimulatorConfig:
        return SimulatorConfig()

    def _profile_path(self, config_name: str) -> Path:
        if config_name == "current":
            return self.config_file
        return self.profiles_dir / f"{config_name}.json"

    def load_config(self, config_name: str = "current") -> Optional[SimulatorConfig]:
        """Load configuration from file.

        Args:
            config_name: Name of configuration to load. "current" loads the current active config.

        Returns:
            SimulatorConfig if found and valid, None otherwise
        """
        config_file = self._profile_path(config_name)

        if not config_file.exists():
            logger.warning(f"Configuration file not found: {config_file}")
            return None

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config_data = json.load(f)
            config = SimulatorConfig.from_dict(config_data)
        except (OSError, json.JSONDecodeError, TypeError, ConfigurationError) as e:
            logger.error(f"Error loading configuration {config_name}: {e}")
            return None

        logger.info(f"Loaded configuration: {config_name}")
        return config

    def save_config(self, config: SimulatorConfig, config_name: str = "current") -> bool:
        """Save configuration to file.

        Returns:
            True if saved successfully, False otherwise
        """
        config_file = self._profile_path(config_name)

        try:
            config.modified_at = datetime.now().isoformat()
            if config_name != "current":
                config.name = config_name
            with open(config_file, "w", encoding="utf-8") as f:
                json.dump(asdict(config), f, indent=2)
        except OSError as e:
            logger.error(f"Error saving configuration {config_name}: {e}")
            return False

        logger.info(f"Saved configuration: {config_name}")
        return True

    def list_profiles(self) -> List[str]:
        """List all available configuration profiles."""
        return sorted(profile_file.stem for profile_file in self.profiles_dir.glob("*.json"))

    def delete_profile(self, profile_name: str) -> bool:
        if profile_name == "current":
            logger.error("Cannot delete current configuration")
            return False

        profile_file = self._profile_path(profile_name)
        if not profile_file.exists():
            logger.warning(f"Profile not found: {profile_name}")
            return False

        try:
            profile_file.unlink()
        except OSError as e:
            logger.error(f"Error deleting profile {profile_name}: {e}")
            return False

        logger.info(f"Deleted profile: {profile_name}")
        return True

    async def update_parameter(self, parameter: str, value: Any) -> bool:
        """Update a top-level configuration parameter live.

        Returns:
            True if updated successfully, False otherwise
        """
        if not self.current_config:
            logger.error("No current configuration loaded")
            return False

        if not hasattr(self.current_config, parameter):
            logger.error(f"Invalid parameter: {parameter}")
            return False

        old_value = getattr(self.current_config, parameter)
        setattr(self.current_config, parameter, value)
        try:
            self.current_config.validate()
        except ConfigurationError as e:
            setattr(self.current_config, parameter, old_value)
            logger.error(f"Rejected {parameter} = {value!r}: {e}")
            return False
        self.save_config(self.current_config)

        change_info = {
            "parameter": parameter,
            "old_value": old_value,
            "new_value": value,
            "timestamp": datetime.now().isoformat(),
        }
        await self._notify_update_callbacks(change_info)

        logger.info(f"Updated parameter {parameter} = {value}")
        return True

    def get_config_summary(self) -> Dict[str, Any]:
        """Get a summary of the current configuration."""
        if not self.current_config:
            return {"status": "No configuration loaded"}

        return {
            "name": self.current_config.name,
            "description": self.current_config.description,
            "initial_mode": self.current_config.initial_mode,
            "interval_ms": self.current_config.interval_ms,
            "sound_enabled": self.current_config.sound_enabled,
            "features": {
                "dashboard": self.current_config.dashboard,
                "api": self.current_config.api,
                "json_output": self.current_config.json_output,
            },
            "api": {
                "host": self.current_config.api_host,
                "port": self.current_config.api_port,
            },
        }


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"Not a boolean: {value!r}")
    return bool(value)


ADJUSTABLE_PARAMETERS: Dict[str, Dict[str, Any]] = {
    "interval_ms": {
        "description": "Scan interval between automatic steps (ms)",
        "type": "int",
        "min": const.MIN_INTERVAL_MS,
        "max": const.MAX_INTERVAL_MS,
    },
    "refresh_rate": {
        "description": "Dashboard refresh rate in milliseconds",
        "type": "int",
        "min": 50,
        "max": 2000,
    },
    "sound_enabled": {
        "description": "Emit tone cues on state changes",
        "type": "bool",
    },
    "clear_history_on_mode_change": {
        "description": "Clear the history strip whenever the mode changes",
        "type": "bool",
    },
}


class LiveConfigurationInterface:
    """Interface for live configuration updates during a session."""

    def __init__(
        self,
        config_manager: ConfigurationManager,
        controller: Optional["SegmentController"] = None,
        notifier: Optional["ToneNotifier"] = None,
        dashboard: Optional["RichDashboard"] = None,
    ):
        self.config_manager = config_manager
        self.controller = controller
        self.notifier = notifier
        self.dashboard = dashboard

        config_manager.add_update_callback(self._handle_config_update)

        logger.info("Live configuration interface initialized")

    async def _handle_config_update(self, change_info: Dict[str, Any]):
        """Apply a configuration change to the running session."""
        parameter = change_info["parameter"]
        new_value = change_info["new_value"]

        logger.info(f"Applying live configuration update: {parameter} = {new_value}")

        if parameter == "interval_ms" and self.controller:
            self.controller.set_interval_ms(new_value)
        elif parameter == "clear_history_on_mode_change" and self.controller:
            self.controller.clear_history_on_mode_change = new_value
        elif parameter == "sound_enabled" and self.notifier:
            self.notifier.set_enabled(new_value)
        elif parameter == "refresh_rate" and self.dashboard:
            self.dashboard.set_refresh_rate(new_value)

    def get_adjustable_parameters(self) -> Dict[str, Dict[str, Any]]:
        """Get parameters that can be adjusted live, with their current values."""
        current = self.config_manager.current_config
        return {
            name: {**info, "current": getattr(current, name) if current else None}
            for name, info in ADJUSTABLE_PARAMETERS.items()
        }

    @staticmethod
    def coerce_value(parameter: str, value: Any) -> Any:
        """Converts and range-checks a value for an adjustable parameter.

        Raises:
            ConfigurationError: If the parameter is unknown or the value invalid.
        """
        info = ADJUSTABLE_PARAMETERS.get(parameter)
        if info is None:
            raise ConfigurationError(f"Parameter '{parameter}' is not adjustable during runtime")

        try:
            if info["type"] == "bool":
                return _to_bool(value)
            coerced = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid value for {parameter}: {e}", value=value) from e

        if not info["min"] <= coerced <= info["max"]:
            raise ConfigurationError(
                f"{parameter} must be between {info['min']} and {info['max']}",
                value=coerced,
            )
        return coerced

    async def update_parameter(self, parameter: str, value: Any) -> bool:
        """Update a parameter with validation."""
        try:
            coerced = self.coerce_value(parameter, value)
        except ConfigurationError as e:
            logger.error(str(e))
            return False
        return await self.config_manager.update_parameter(parameter, coerced)
