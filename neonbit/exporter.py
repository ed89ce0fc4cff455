# neonbit/exporter.py
"""
State snapshot export.

A snapshot is ``{timestamp, mode, decimal, binary}`` written as indented
JSON to ``neonbit-state-<epoch ms>.json``.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from . import constants as const
from .exceptions import ExportError
from .register_model import EventKind

if TYPE_CHECKING:
    from .controller import SegmentController

logger = logging.getLogger(__name__)


def _iso_timestamp(now: datetime) -> str:
    # Millisecond precision with a 'Z' suffix
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def build_snapshot(mode, value: int, pattern: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    if now is None:
        now = datetime.now(timezone.utc)
    return {
        "timestamp": _iso_timestamp(now),
        "mode": getattr(mode, "value", mode),
        "decimal": value,
        "binary": pattern,
    }


def serialize_snapshot(snapshot: Dict[str, Any]) -> str:
    return json.dumps(snapshot, indent=const.EXPORT_INDENT)


def export_filename(now: datetime) -> str:
    return f"{const.EXPORT_FILENAME_PREFIX}{int(now.timestamp() * 1000)}.json"


def export_state(
    controller: "SegmentController",
    directory: Union[str, Path] = ".",
    now: Optional[datetime] = None,
) -> Path:
    """
    Writes the controller's current snapshot into `directory`.

    Returns:
        Path of the written file.

    Raises:
        ExportError: If the file cannot be written.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    snapshot = build_snapshot(controller.mode, controller.value, controller.pattern, now)
    target = Path(directory).expanduser() / export_filename(now)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(serialize_snapshot(snapshot), encoding="utf-8")
    except OSError as e:
        logger.error(f"Error exporting state to {target}: {e}")
        raise ExportError(f"Could not write snapshot to {target}") from e

    logger.info(f"Exported state snapshot: {target}")
    controller.emit(EventKind.EXPORT, path=str(target))
    return target
