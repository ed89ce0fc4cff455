"""
Collaborators that observe or drive a NeonBit session.

This package provides:
- Tone-cue notifier
- Rich console dashboard with interactive keyboard controls
- HTTP API and a requests-based client for programmatic access
- Configuration profiles and live parameter adjustment
"""

from .config_manager import ConfigurationManager, LiveConfigurationInterface, SimulatorConfig
from .http_api import JSONOutputHandler, SegmentHTTPServer
from .rich_dashboard import RichDashboard
from .tone_notifier import ToneCue, ToneNotifier

__all__ = [
    "ConfigurationManager",
    "LiveConfigurationInterface",
    "SimulatorConfig",
    "JSONOutputHandler",
    "SegmentHTTPServer",
    "RichDashboard",
    "ToneCue",
    "ToneNotifier",
]
