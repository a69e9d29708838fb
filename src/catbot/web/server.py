"""
Web server - aiohttp application for remote control and debugging.
"""

import asyncio
import json
import logging

from aiohttp import web

from catbot.comm import Channel
from catbot.config import WEB_HOST, WEB_PORT
from catbot.errors import BusError
from catbot.messages import Message, TURN_REQUESTS, parse_message

logger = logging.getLogger(__name__)

INDEX_HTML = """<!DOCTYPE html>
<html>
<head><title>catbot</title></head>
<body>
    <h1>catbot remote control</h1>
    <ul>
        <li>GET /api/status - navigation state</li>
        <li>POST /api/turn/left, POST /api/turn/right - request a turn</li>
        <li>POST /api/stop - stop the wheels</li>
        <li>GET/POST /api/params - tunable parameters</li>
        <li>WS /ws/messages - bus traffic, send {"message": "LEFT_TURN_REQUEST"}</li>
    </ul>
</body>
</html>
"""


class WebServer:
    """
    Remote control interface.

    Provides:
    - Status and parameter API
    - Turn requests (forwarded to navigation over the bus)
    - WebSocket mirror of the MESSAGE and LOG channels
    """

    def __init__(self, controller=None):
        """
        Args:
            controller: Controller (or anything with bus/params/navigation)
        """
        self.controller = controller
        self.app = web.Application()
        self._setup_routes()

    def _setup_routes(self):
        """Configure routes."""
        self.app.router.add_get("/", self.index)

        # API
        self.app.router.add_get("/api/status", self.api_status)
        self.app.router.add_post("/api/turn/{direction}", self.api_turn)
        self.app.router.add_post("/api/stop", self.api_stop)

        # Runtime parameters
        self.app.router.add_get("/api/params", self.api_params_get)
        self.app.router.add_post("/api/params", self.api_params_set)

        # WebSocket
        self.app.router.add_get("/ws/messages", self.ws_messages)

    async def index(self, request):
        """Landing page."""
        return web.Response(text=INDEX_HTML, content_type="text/html")

    async def api_status(self, request):
        """Get current navigation status."""
        status = {
            "state": "unknown",
            "turning": False,
        }

        navigation = self._get_navigation()
        if navigation:
            status.update(navigation.state_machine.status())
            status["proximity"] = navigation.sensor.cm

        return web.json_response(status)

    async def api_turn(self, request):
        """POST /api/turn/{left|right} - Request a manual turn."""
        direction = request.match_info["direction"]
        request_message = {
            "left": Message.LEFT_TURN_REQUEST,
            "right": Message.RIGHT_TURN_REQUEST,
        }.get(direction)
        if request_message is None:
            return web.json_response({"error": f"Unknown direction: {direction}"}, status=404)

        bus = self._get_bus()
        if not bus:
            return web.json_response({"error": "Bus not available"}, status=503)

        command = self._forward_request(bus, request_message)
        return web.json_response({"ok": True, "message": command.value})

    async def api_stop(self, request):
        """POST /api/stop - Stop the wheels."""
        navigation = self._get_navigation()
        if not navigation:
            return web.json_response({"error": "Navigation not available"}, status=503)

        navigation.stop()
        return web.json_response({"ok": True, "state": navigation.state_machine.state.name})

    async def api_params_get(self, request):
        """Get current tunable parameters."""
        if self.controller and getattr(self.controller, "params", None):
            return web.json_response(self.controller.params.to_dict())
        return web.json_response({"error": "Parameters not available"}, status=404)

    async def api_params_set(self, request):
        """Update tunable parameters. Include _save=true to persist to disk."""
        if not self.controller or not getattr(self.controller, "params", None):
            return web.json_response({"error": "Parameters not available"}, status=404)

        try:
            data = await request.json()
        except json.JSONDecodeError:
            return web.json_response({"error": "Invalid JSON"}, status=400)
        if not isinstance(data, dict):
            return web.json_response({"error": "Expected a JSON object"}, status=400)

        save = data.pop("_save", False)
        self.controller.params.update(**data)

        if save:
            self.controller.params.save()

        return web.json_response(self.controller.params.to_dict())

    async def ws_messages(self, request):
        """WebSocket mirroring bus traffic and accepting turn requests."""
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        bus = self._get_bus()
        if not bus:
            await ws.send_json({"error": "Bus not available"})
            await ws.close()
            return ws

        logger.info("Message WebSocket connected")

        outbox: asyncio.Queue = asyncio.Queue()

        def on_message(message):
            outbox.put_nowait({"channel": Channel.MESSAGE.value, "message": _jsonable(message)})

        def on_log(record):
            outbox.put_nowait({"channel": Channel.LOG.value, "message": record})

        async def sender():
            while not ws.closed:
                await ws.send_json(await outbox.get())

        await bus.subscribe(on_message, Channel.MESSAGE)
        await bus.subscribe(on_log, Channel.LOG)
        sender_task = asyncio.ensure_future(sender())

        try:
            async for msg in ws:
                if msg.type == web.WSMsgType.TEXT:
                    try:
                        data = json.loads(msg.data)
                        message = parse_message(data.get("message"))
                        if message not in TURN_REQUESTS:
                            await ws.send_json({"error": f"Unsupported message: {data.get('message')!r}"})
                            continue
                        self._forward_request(bus, message)

                    except (ValueError, AttributeError) as e:
                        await ws.send_json({"error": str(e)})

        except (ConnectionResetError, BusError) as e:
            logger.error(f"Message WebSocket error: {e}")
        finally:
            bus.unsubscribe(on_message, Channel.MESSAGE)
            bus.unsubscribe(on_log, Channel.LOG)
            sender_task.cancel()
            try:
                await sender_task
            except (asyncio.CancelledError, ConnectionResetError):
                pass
            logger.info("Message WebSocket disconnected")

        return ws

    def _forward_request(self, bus, request_message: Message) -> Message:
        """Turn a remote request into a navigation command on the bus."""
        command = TURN_REQUESTS[request_message]
        logger.info(f"Received {request_message.value}")
        bus.pub(command)
        return command

    def _get_bus(self):
        if self.controller and getattr(self.controller, "bus", None):
            return self.controller.bus
        return None

    def _get_navigation(self):
        if self.controller and getattr(self.controller, "navigation", None):
            return self.controller.navigation
        return None


def _jsonable(message):
    if isinstance(message, Message):
        return message.value
    return message


def create_app(controller=None) -> web.Application:
    """Create the web application."""
    server = WebServer(controller)
    return server.app


async def run_server(controller=None, host=WEB_HOST, port=WEB_PORT):
    """Run the web server."""
    app = create_app(controller)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Web server running at http://{host}:{port}")
    return runner
