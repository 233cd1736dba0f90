"""REST API endpoints for Bluetooth media control.

Every response is a JSON envelope: ``{"Output": ..., "Status": ..., "OK": ...}``
for queries, ``{"Output": ..., "OK": ...}`` for plain operations.
"""

import logging
from typing import TYPE_CHECKING

from aiohttp import web

from ..config import ADDRESS_KEY, CONFIG_COMPONENT

if TYPE_CHECKING:
    from ..manager import BluetoothMediaManager

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_FAIL = "fail"
MEDIA_ERROR = "Error getting media info"


def envelope(output, ok: bool, status: str | None = None, http_status: int = 200) -> web.Response:
    """Render the standard JSON response envelope."""
    body = {"Output": output}
    if status is not None:
        body["Status"] = status
    body["OK"] = ok
    return web.json_response(body, status=http_status)


def _query_response(result: dict | None) -> web.Response:
    if result is None:
        return envelope(MEDIA_ERROR, False, STATUS_FAIL)
    return envelope(result, True, STATUS_SUCCESS)


def create_api_routes(manager: "BluetoothMediaManager") -> list[web.RouteDef]:
    """Create all API route definitions."""
    routes = web.RouteTableDef()

    # -- Bluetooth --

    @routes.get("/bluetooth")
    @routes.get("/bluetooth/getDeviceInfo")
    async def get_device_info(request: web.Request) -> web.Response:
        """Playback status of the active device."""
        return _query_response(await manager.get_device_info())

    @routes.get("/bluetooth/getMediaInfo")
    async def get_media_info(request: web.Request) -> web.Response:
        """Track metadata, device status and album artwork path."""
        return _query_response(await manager.get_media_info())

    @routes.get("/bluetooth/connect")
    async def connect(request: web.Request) -> web.Response:
        """Scan and connect; blocks for the fixed connect delay."""
        result = await manager.connect()
        return envelope("OK" if result.ok else result.output.strip(), result.ok)

    @routes.get("/bluetooth/disconnect")
    async def disconnect(request: web.Request) -> web.Response:
        result = await manager.disconnect()
        return envelope("OK" if result.ok else result.output.strip(), result.ok)

    @routes.get("/bluetooth/prev")
    async def prev(request: web.Request) -> web.Response:
        manager.previous()
        return envelope("OK", True)

    @routes.get("/bluetooth/next")
    async def next_track(request: web.Request) -> web.Response:
        manager.next()
        return envelope("OK", True)

    @routes.get("/bluetooth/play")
    async def play(request: web.Request) -> web.Response:
        manager.play()
        return envelope("OK", True)

    @routes.get("/bluetooth/pause")
    async def pause(request: web.Request) -> web.Response:
        manager.pause()
        return envelope("OK", True)

    @routes.get("/bluetooth/refresh")
    async def refresh(request: web.Request) -> web.Response:
        """Re-derive the active address from BlueZ in the background."""
        manager.force_refresh()
        return envelope("OK", True)

    @routes.get("/bluetooth/address")
    async def get_address(request: web.Request) -> web.Response:
        address = manager.address
        return envelope(address, bool(address))

    @routes.post("/bluetooth/address/{address}")
    async def set_address(request: web.Request) -> web.Response:
        """Bind the given device address explicitly."""
        await manager.set_address(request.match_info["address"])
        address = manager.address
        return envelope(address, bool(address))

    # -- Settings --

    @routes.get("/settings")
    async def get_all_settings(request: web.Request) -> web.Response:
        return envelope(manager.settings.get_all(), True)

    @routes.get("/settings/{component}")
    async def get_setting(request: web.Request) -> web.Response:
        component = request.match_info["component"]
        values = manager.settings.get_component(component)
        if values is None:
            return envelope(f"Component {component} not found", False, http_status=404)
        return envelope(values, True)

    @routes.get("/settings/{component}/{name}")
    async def get_setting_value(request: web.Request) -> web.Response:
        component = request.match_info["component"]
        name = request.match_info["name"]
        value = manager.settings.get(component, name)
        if value is None:
            return envelope(f"Setting {component}/{name} not found", False, http_status=404)
        return envelope(value, True)

    @routes.post("/settings/{component}/{name}/{value}")
    async def set_setting_value(request: web.Request) -> web.Response:
        """Set and persist one value.

        The bound device address is owned by the address store, so writes
        to it go through there to stay normalized and take effect at once.
        """
        component = request.match_info["component"]
        name = request.match_info["name"]
        value = request.match_info["value"]
        if (component.upper(), name.upper()) == (CONFIG_COMPONENT, ADDRESS_KEY):
            await manager.set_address(value)
            return envelope(manager.address, bool(manager.address))
        await manager.settings.set(component, name, value)
        return envelope(manager.settings.get(component, name), True)

    return routes
