"""
HTTP API for programmatic access to a running NeonBit session.

Provides a REST API that lets scripts and external renderers read the
register, run state and history, and send the same commands as the
dashboard keys.
"""

import json
import logging
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from .. import constants as const
from ..controller import SegmentController
from ..digit_table import truth_table
from ..exceptions import ExportError, OutOfRangeError
from ..exporter import export_state
from ..modes import Mode
from ..register_model import RegisterEvent

logger = logging.getLogger(__name__)


# Pydantic Models for Request Validation
class ModePayload(BaseModel):
    mode: Mode


class PatternPayload(BaseModel):
    text: str


class NavigatePayload(BaseModel):
    direction: int = Field(..., description="-1 for previous digit, +1 for next")


class RunPayload(BaseModel):
    running: bool


class IntervalPayload(BaseModel):
    interval_ms: int = Field(..., ge=const.MIN_INTERVAL_MS, le=const.MAX_INTERVAL_MS)


class ParameterUpdatePayload(BaseModel):
    value: Any


class SegmentHTTPServer:
    """
    HTTP server exposing one SegmentController.

    Commands answer ``{"applied": bool, "state": {...}}``; ``applied`` is
    False when the active mode ignores the command.
    """

    def __init__(
        self,
        controller: SegmentController,
        port: int = 8765,
        host: str = "127.0.0.1",
        config_manager=None,
        live_config=None,
        export_dir: str = ".",
    ):
        """
        Initialize the HTTP server.

        Args:
            controller: Session controller to expose
            port: Port to bind server to
            host: Host address to bind to
            config_manager: Optional configuration manager for /config
            live_config: Optional live configuration interface for runtime updates
            export_dir: Directory for POST /export snapshots
        """
        self.controller = controller
        self.config_manager = config_manager
        self.live_config = live_config
        self.export_dir = export_dir
        self.port = port
        self.host = host

        self.app = FastAPI(
            title="NeonBit Simulator API",
            description="Read and drive a simulated 7-segment display",
            version=__version__,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        # Add CORS middleware for browser-based renderers
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()

    def _result(self, event: Optional[RegisterEvent]) -> Dict[str, Any]:
        return {"applied": event is not None, "state": self.controller.get_state()}

    def _setup_routes(self):
        """Setup API routes"""
        controller = self.controller

        @self.app.exception_handler(OutOfRangeError)
        async def out_of_range_handler(request: Request, exc: OutOfRangeError):
            return JSONResponse(status_code=422, content={"detail": str(exc)})

        @self.app.get("/", summary="API information")
        async def root():
            return {
                "name": "NeonBit Simulator API",
                "version": __version__,
                "description": "Programmatic access to a simulated 7-segment display",
                "endpoints": {
                    "/state": "Current mode, register, run state and history",
                    "/history": "History samples, newest first",
                    "/truth-table": "Digit to segment pattern table",
                    "/snapshot": "Export record for the current state",
                    "/mode": "Select mode (POST)",
                    "/toggle/{index}": "Toggle a segment in manual mode (POST)",
                    "/pattern": "Load a bit pattern from text (POST)",
                    "/step": "Advance the register once (POST)",
                    "/navigate": "Previous/next digit in counter mode (POST)",
                    "/digit/{digit}": "Show a digit in counter mode (POST)",
                    "/reset": "Reset the register (POST)",
                    "/run": "Start or stop automatic stepping (POST)",
                    "/interval": "Set the scan interval (POST)",
                    "/export": "Write a snapshot file (POST)",
                    "/health": "Health check",
                    "/docs": "Interactive API documentation",
                },
            }

        @self.app.get("/health", summary="Health check")
        async def health_check():
            return {"status": "healthy"}

        @self.app.get("/state", summary="Get complete session state")
        async def get_state():
            return controller.get_state()

        @self.app.get("/history", summary="Get history samples")
        async def get_history(limit: int = const.HISTORY_CAPACITY):
            samples = controller.get_history()
            return {
                "history": samples[: max(0, limit)],
                "capacity": controller.history.capacity,
                "total_samples": len(samples),
            }

        @self.app.get("/truth-table", summary="Get the digit truth table")
        async def get_truth_table():
            return {"rows": truth_table()}

        @self.app.get("/snapshot", summary="Get the export record")
        async def get_snapshot():
            return controller.snapshot()

        @self.app.post("/mode", summary="Select mode")
        async def select_mode(payload: ModePayload):
            return self._result(controller.select_mode(payload.mode))

        @self.app.post("/toggle/{index}", summary="Toggle a segment")
        async def toggle_bit(index: int):
            return self._result(controller.toggle_bit(index))

        @self.app.post("/pattern", summary="Load a bit pattern from text")
        async def set_pattern(payload: PatternPayload):
            return self._result(controller.set_pattern_from_text(payload.text))

        @self.app.post("/step", summary="Advance the register once")
        async def step():
            return self._result(controller.step())

        @self.app.post("/navigate", summary="Previous/next digit")
        async def navigate(payload: NavigatePayload):
            return self._result(controller.navigate(payload.direction))

        @self.app.post("/digit/{digit}", summary="Show a digit")
        async def select_digit(digit: int):
            return self._result(controller.select_digit(digit))

        @self.app.post("/reset", summary="Reset the register")
        async def reset():
            return self._result(controller.reset())

        @self.app.post("/run", summary="Start or stop automatic stepping")
        async def set_running(payload: RunPayload):
            event = controller.set_running(payload.running)
            return {
                "applied": event is not None,
                "run_state": controller.run_state.as_dict(),
            }

        @self.app.post("/interval", summary="Set the scan interval")
        async def set_interval(payload: IntervalPayload):
            return {"applied": True, "run_state": controller.set_interval_ms(payload.interval_ms).as_dict()}

        @self.app.post("/export", summary="Write a snapshot file")
        async def export():
            try:
                path = export_state(controller, self.export_dir)
            except ExportError as e:
                logger.error(f"Export requested over HTTP failed: {e}")
                raise HTTPException(status_code=500, detail=str(e))
            return {"success": True, "path": str(path), "snapshot": json.loads(path.read_text(encoding="utf-8"))}

        if self.config_manager:
            @self.app.get("/config", summary="Get current configuration")
            async def get_configuration():
                return self.config_manager.get_config_summary()

            @self.app.get("/config/profiles", summary="List configuration profiles")
            async def list_profiles():
                return {"profiles": self.config_manager.list_profiles()}

        if self.live_config:
            @self.app.get("/config/parameters", summary="Get adjustable parameters")
            async def get_adjustable_parameters():
                return {"parameters": self.live_config.get_adjustable_parameters()}

            @self.app.post("/config/parameters/{parameter_name}", summary="Update parameter")
            async def update_parameter(parameter_name: str, request_data: ParameterUpdatePayload):
                success = await self.live_config.update_parameter(parameter_name, request_data.value)
                if success:
                    return {"success": True, "message": f"Updated {parameter_name} = {request_data.value}"}
                return {"success": False, "message": f"Failed to update {parameter_name}"}

    async def start_server(self):
        """
        Start the HTTP server.

        Runs the server indefinitely until cancelled.
        """
        config = uvicorn.Config(
            self.app,
            host=self.host,
            port=self.port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)
        await server.serve()

    def get_server_info(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "base_url": f"http://{self.host}:{self.port}",
            "docs_url": f"http://{self.host}:{self.port}/docs",
            "state_url": f"http://{self.host}:{self.port}/state",
        }


class JSONOutputHandler:
    """
    Writes controller events to stdout as JSON lines.

    Register with ``controller.add_listener(handler.on_event)``.
    """

    def __init__(self, controller: SegmentController, stream=None):
        self.controller = controller
        self.stream = stream
        self.started = False

    def emit_event(self, event_type: str, data: Dict[str, Any]):
        event = {"event": event_type, **data}
        print(json.dumps(event, default=str), file=self.stream, flush=True)

    def emit_startup(self, config: Dict[str, Any]):
        if not self.started:
            self.emit_event("simulator_started", {"config": config, "state": self.controller.get_state()})
            self.started = True

    def emit_status_update(self):
        self.emit_event("status_update", self.controller.get_state())

    def on_event(self, event: RegisterEvent):
        self.emit_event(event.kind.value, event.as_dict())
