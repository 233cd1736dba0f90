"""Entry point for the Bluetooth media control service."""

import asyncio
import json
import logging
import signal
import sys
from pathlib import Path

import typer

from .config import AppConfig
from .manager import BluetoothMediaManager
from .persistence.store import DEFAULT_SETTINGS_PATH, SettingsStore
from .web.server import WebServer

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

app = typer.Typer(help="HTTP control surface for a paired Bluetooth media device")


def setup_logging(level_name: str) -> None:
    """Send records to stdout at ``level_name``, keeping bus and HTTP chatter at WARNING."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=sys.stdout,
    )
    logging.getLogger("dbus_next").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def load_config(
    settings_file: Path, port: int | None = None, verbose: bool = False
) -> tuple[SettingsStore, AppConfig]:
    """Read the settings file and apply command-line overrides on top of CONFIG."""
    settings = SettingsStore(settings_file)
    settings.load()
    config = AppConfig.from_settings(settings)
    if verbose:
        config.verbose = True
    if port is not None:
        config.http_port = port
    return settings, config


async def main(settings_file: Path, port: int | None = None, verbose: bool = False) -> None:
    """Serve the media control API until SIGTERM or SIGINT."""
    settings, config = load_config(settings_file, port=port, verbose=verbose)
    setup_logging(config.effective_log_level)

    logger = logging.getLogger(__name__)
    logger.info("Using settings: %s", json.dumps(settings.get_all()))

    manager = BluetoothMediaManager(config, settings)
    web_server = WebServer(manager)

    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Stop requested, closing HTTP listener")
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _signal_handler)

    try:
        await web_server.start()
        await manager.start()
        logger.info("Media control service ready on port %d", config.http_port)
        await shutdown_event.wait()
    except Exception as e:
        logger.error("Media control service crashed: %s", e, exc_info=True)
    finally:
        await web_server.stop()
        await manager.shutdown()
        logger.info("Media control service stopped")


@app.command()
def serve(
    settings_file: Path = typer.Option(
        DEFAULT_SETTINGS_PATH,
        "--settings-file",
        envvar="BT_MEDIA_SETTINGS",
        help="File to recover the persistent settings from.",
    ),
    port: int | None = typer.Option(None, "--port", help="Override CONFIG/HTTP_PORT."),
    verbose: bool = typer.Option(False, "--verbose", help="Log at DEBUG level."),
) -> None:
    """Run the HTTP service."""
    asyncio.run(main(settings_file, port=port, verbose=verbose))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
