"""
Command-Line Interface for the NeonBit simulator.
Uses 'click' for CLI argument parsing and command structure.
"""
import asyncio
import logging
import signal
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import constants as const
from .controller import SegmentController
from .digit_table import truth_table
from .interface.config_manager import ConfigurationManager, LiveConfigurationInterface
from .interface.http_api import JSONOutputHandler, SegmentHTTPServer
from .interface.interactive_controls import InteractiveController
from .interface.rich_dashboard import RichDashboard
from .interface.tone_notifier import ToneNotifier
from .modes import Mode

# Basic logging setup for the simulator
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("NeonBitCLI")

COMPONENT_LOGGERS = ("SegmentController", "RegisterModel", "ModeStateMachine", "Stepper")


def print_truth_table(console: Optional[Console] = None):
    """Prints the 0-9 digit table."""
    console = console or Console()
    table = Table(title="Logic Truth Table (0-9)", header_style="bold magenta")
    table.add_column("Digit", justify="right")
    table.add_column("Binary (abcdefg)", style="green")
    table.add_column("Raw", justify="right", style="dim")
    for row in truth_table():
        table.add_row(str(row["digit"]), row["binary"], row["raw"])
    console.print(table)


async def _cancel_task(task: Optional[asyncio.Task], name: str):
    if task is None or task.done():
        return
    logger.info(f"Cancelling {name} task...")
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        logger.info(f"{name.capitalize()} task cancelled successfully.")
    except Exception as e:
        logger.error(f"Error during {name} shutdown: {e}")


async def shutdown(sig, loop, controller, api_task=None, json_handler=None, dashboard_task=None, interactive_task=None):
    """Graceful shutdown for the simulator."""
    logger.info(f"Received exit signal {sig.name}...")
    await controller.shutdown()

    if json_handler:
        json_handler.emit_status_update()

    await _cancel_task(api_task, "API server")
    await _cancel_task(dashboard_task, "dashboard")
    await _cancel_task(interactive_task, "interactive controller")

    tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    if tasks:
        logger.info(f"Cancelling {len(tasks)} outstanding tasks...")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    if loop.is_running():
        loop.stop()
    logger.info("Simulator shutdown complete.")


@click.command()
@click.option(
    "--mode",
    type=click.Choice([m.value for m in Mode], case_sensitive=False),
    default=Mode.ANIMATION.value,
    help="Mode the display starts in.",
    show_default=True,
)
@click.option(
    "--interval-ms",
    default=const.DEFAULT_INTERVAL_MS,
    type=click.IntRange(const.MIN_INTERVAL_MS, const.MAX_INTERVAL_MS),
    help="Scan interval between automatic steps in milliseconds.",
    show_default=True,
)
@click.option(
    "--autostart",
    is_flag=True,
    help="Start automatic stepping immediately (animation and counter modes).",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(
        ["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False
    ),
    help="Logging level for the simulator.",
    show_default=True,
)
@click.option(
    "--json-output",
    is_flag=True,
    help="Print every state change to stdout as a JSON line.",
)
@click.option(
    "--api",
    is_flag=True,
    help="Enable the HTTP API server for programmatic access.",
)
@click.option(
    "--api-host",
    default="127.0.0.1",
    help="Host for the HTTP API server.",
    show_default=True,
)
@click.option(
    "--api-port",
    default=8765,
    type=int,
    help="Port for the HTTP API server.",
    show_default=True,
)
@click.option(
    "--dashboard",
    is_flag=True,
    help="Enable the Rich console dashboard with keyboard controls.",
)
@click.option(
    "--refresh-rate",
    default=200,
    type=int,
    help="Dashboard refresh rate in milliseconds.",
    show_default=True,
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable color output for compatibility.",
)
@click.option(
    "--mute",
    is_flag=True,
    help="Start with tone cues muted.",
)
@click.option(
    "--export-dir",
    default=".",
    type=click.Path(file_okay=False),
    help="Directory for exported state snapshots.",
    show_default=True,
)
@click.option(
    "--config-profile",
    type=str,
    help="Load configuration from named profile.",
)
@click.option(
    "--save-config",
    type=str,
    help="Save current configuration as named profile.",
)
@click.option(
    "--config-dir",
    type=str,
    help="Directory for configuration files (default: ~/.neonbit_simulator_config).",
)
@click.option(
    "--truth-table",
    "show_truth_table",
    is_flag=True,
    help="Print the digit truth table and exit.",
)
def main(
    mode: str,
    interval_ms: int,
    autostart: bool,
    log_level: str,
    json_output: bool,
    api: bool,
    api_host: str,
    api_port: int,
    dashboard: bool,
    refresh_rate: int,
    no_color: bool,
    mute: bool,
    export_dir: str,
    config_profile: Optional[str],
    save_config: Optional[str],
    config_dir: Optional[str],
    show_truth_table: bool,
):
    """
    NeonBit 7-segment display simulator.

    Drives a single simulated 7-segment display through its animation,
    manual and counter modes, with an optional console dashboard, HTTP API
    and JSON event stream.
    """
    numeric_log_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(numeric_log_level)  # Set root logger for all modules
    logger.setLevel(numeric_log_level)
    for name in COMPONENT_LOGGERS:
        logging.getLogger(name).setLevel(numeric_log_level)

    if show_truth_table:
        print_truth_table(Console(no_color=no_color))
        return

    # Initialize configuration management
    config_manager = ConfigurationManager(config_dir)

    if config_profile:
        loaded_config = config_manager.load_config(config_profile)
        if not loaded_config:
            logger.error(f"Failed to load configuration profile: {config_profile}")
            return
        config_manager.current_config = loaded_config
        logger.info(f"Loaded configuration profile: {config_profile}")
    else:
        # Create default configuration from CLI parameters
        current_config = config_manager.create_default_config()
        current_config.initial_mode = mode.upper()
        current_config.interval_ms = interval_ms
        current_config.autostart = autostart
        current_config.sound_enabled = not mute
        current_config.api_host = api_host
        current_config.api_port = api_port
        current_config.refresh_rate = refresh_rate
        current_config.no_color = no_color
        current_config.log_level = log_level.upper()
        current_config.export_dir = export_dir
        current_config.json_output = json_output
        current_config.api = api
        current_config.dashboard = dashboard
        config_manager.current_config = current_config

    config = config_manager.current_config
    logger.info("Starting NeonBit simulator...")
    logger.info(
        f"Config: Mode={config.initial_mode}, Interval={config.interval_ms}ms, "
        f"Autostart={config.autostart}, Sound={config.sound_enabled}"
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    controller = SegmentController(
        initial_mode=Mode.parse(config.initial_mode),
        interval_ms=config.interval_ms,
        clear_history_on_mode_change=config.clear_history_on_mode_change,
        loop=loop,
    )
    notifier = ToneNotifier(enabled=config.sound_enabled)
    controller.add_listener(notifier)

    live_config_interface = LiveConfigurationInterface(config_manager, controller, notifier)

    api_task: Optional[asyncio.Task] = None
    json_handler: Optional[JSONOutputHandler] = None
    dashboard_task: Optional[asyncio.Task] = None
    interactive_task: Optional[asyncio.Task] = None

    if config.json_output:
        json_handler = JSONOutputHandler(controller)
        controller.add_listener(json_handler.on_event)
        json_handler.emit_startup({
            "mode": config.initial_mode,
            "interval_ms": config.interval_ms,
            "autostart": config.autostart,
            "sound_enabled": config.sound_enabled,
        })

    if config.api:
        api_server = SegmentHTTPServer(
            controller,
            config.api_port,
            config.api_host,
            config_manager=config_manager,
            live_config=live_config_interface,
            export_dir=config.export_dir,
        )
        api_task = loop.create_task(api_server.start_server())
        info = api_server.get_server_info()
        logger.info(f"HTTP API server starting on {info['base_url']}")
        logger.info(f"API documentation available at {info['docs_url']}")

    if config.dashboard:
        dashboard_instance = RichDashboard(
            controller,
            notifier=notifier,
            refresh_rate_ms=config.refresh_rate,
            no_color=config.no_color,
            show_labels=config.show_labels,
        )
        controller.add_listener(dashboard_instance.on_event)
        live_config_interface.dashboard = dashboard_instance

        interactive_controller = InteractiveController(
            dashboard=dashboard_instance,
            controller=controller,
            notifier=notifier,
            config_manager=config_manager,
            live_config=live_config_interface,
            export_dir=config.export_dir,
        )
        dashboard_instance.set_interactive_controller(interactive_controller)

        dashboard_task = loop.create_task(dashboard_instance.run())
        interactive_task = loop.create_task(interactive_controller.start())
        logger.info(f"Rich dashboard started with {config.refresh_rate}ms refresh rate")
        logger.info("Interactive controls enabled - press 'h' for help")

    if config.autostart:
        if controller.set_running(True) is None:
            logger.warning(f"Autostart ignored in {controller.mode.value} mode")

    # Setup signal handlers for graceful shutdown
    signals = (signal.SIGHUP, signal.SIGTERM, signal.SIGINT)
    for s in signals:
        loop.add_signal_handler(
            s,
            lambda s=s: asyncio.ensure_future(
                shutdown(s, loop, controller, api_task, json_handler, dashboard_task, interactive_task),
                loop=loop,
            ),
        )

    try:
        if config.dashboard:
            logger.info("Simulator running with Rich dashboard. Press Ctrl+C to stop.")
        elif config.json_output:
            logger.info("Simulator running in JSON output mode. Press Ctrl+C to stop.")
        elif config.api:
            logger.info(f"Simulator running with HTTP API on port {config.api_port}. Press Ctrl+C to stop.")
        else:
            logger.info("Simulator running headless. Press Ctrl+C to stop.")
        loop.run_forever()  # Will be stopped by shutdown()
    except KeyboardInterrupt:  # Should be caught by signal handler mostly
        logger.info("KeyboardInterrupt received directly by CLI.")
    finally:
        logger.info("CLI main loop finalizing...")
        # Stop the stepper if shutdown() did not get to run
        loop.run_until_complete(controller.shutdown())
        loop.close()
        logger.info("Simulator CLI finished.")

    # Save configuration if requested
    if save_config and config_manager.current_config:
        success = config_manager.save_config(config_manager.current_config, save_config)
        if success:
            logger.info(f"Configuration saved as profile: {save_config}")
        else:
            logger.error(f"Failed to save configuration profile: {save_config}")


if __name__ == "__main__":
    main()
