"""aiohttp web server for the media control API."""

import logging
from typing import TYPE_CHECKING

from aiohttp import web

from .api import create_api_routes, envelope

if TYPE_CHECKING:
    from ..manager import BluetoothMediaManager

logger = logging.getLogger(__name__)


@web.middleware
async def _json_errors(request: web.Request, handler):
    """Turn unexpected handler failures into a JSON envelope."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.error("Request %s %s failed: %s", request.method, request.path, e, exc_info=True)
        return envelope("Operation failed. Check logs for details.", False, http_status=500)


def create_app(manager: "BluetoothMediaManager") -> web.Application:
    """Build the aiohttp application with all API routes."""
    app = web.Application(middlewares=[_json_errors])
    app.router.add_routes(create_api_routes(manager))
    return app


class WebServer:
    """HTTP server exposing the Bluetooth and settings routes."""

    def __init__(self, manager: "BluetoothMediaManager"):
        self._manager = manager
        self._app = create_app(manager)
        self._runner: web.AppRunner | None = None

    @property
    def app(self) -> web.Application:
        return self._app

    async def start(self) -> None:
        """Start the web server."""
        host = self._manager.config.http_host
        port = self._manager.config.http_port
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, host, port)
        await site.start()
        logger.info("Web server listening on %s:%d", host, port)

    async def stop(self) -> None:
        """Stop the web server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        logger.info("Web server stopped")
