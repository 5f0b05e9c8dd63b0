"""REST API server for Jarvis Voice.

Exposes the orchestrator state, the result panel the UI draws from, the
listening toggle, and a transcript push endpoint. Runs on the
orchestrator's own event loop.
"""

import json
import time
from typing import Any, Optional

from aiohttp import web

from jarvis.utils import jarvis_log


def _json_response(data: Any, status: int = 200) -> web.Response:
    """Create a JSON response with proper content type."""
    return web.Response(
        text=json.dumps(data, ensure_ascii=False, default=str),
        status=status,
        content_type="application/json",
    )


def _error_response(message: str, status: int = 400) -> web.Response:
    """Create a JSON error response."""
    return _json_response({"error": message}, status=status)


class JarvisAPI:
    """HTTP API server for Jarvis Voice."""

    def __init__(self, orchestrator: Any, host: str = "127.0.0.1", port: int = 7790):
        """
        Args:
            orchestrator: DialogueOrchestrator instance (state, panel, toggle, input source)
            host: Bind address
            port: Bind port
        """
        self.orchestrator = orchestrator
        self.host = host
        self.port = port
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None
        self._start_time: float = time.time()

    def build_app(self) -> web.Application:
        """Create the aiohttp application with all routes registered."""
        self._app = web.Application()
        self._setup_routes()
        return self._app

    async def start(self):
        """Bind and start serving on the running loop."""
        app = self._app or self.build_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        jarvis_log("API", f"Server listening on http://{self.host}:{self.port}", level="INFO")

    async def stop(self):
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        jarvis_log("API", "Server stopped", level="INFO")

    def _setup_routes(self):
        """Register all API routes."""
        router = self._app.router
        router.add_get("/api/status", self._handle_status)
        router.add_get("/api/panel", self._handle_panel)
        router.add_post("/api/toggle", self._handle_toggle)
        router.add_post("/api/transcript", self._handle_transcript)

    # ------------------------------------------------------------------
    # Route handlers
    # ------------------------------------------------------------------

    async def _handle_status(self, request: web.Request) -> web.Response:
        """GET /api/status - Return current orchestrator state."""
        data = dict(self.orchestrator.status())
        data["uptime_seconds"] = round(time.time() - self._start_time, 1)
        return _json_response(data)

    async def _handle_panel(self, request: web.Request) -> web.Response:
        """GET /api/panel - Everything the result panel shows."""
        return _json_response(self.orchestrator.panel.to_dict())

    async def _handle_toggle(self, request: web.Request) -> web.Response:
        """POST /api/toggle - Microphone button."""
        state = self.orchestrator.toggle()
        jarvis_log("API", f"Toggle → {state.value}", level="INFO")
        return _json_response({"state": state.value, "listening": self.orchestrator.panel.listening})

    async def _handle_transcript(self, request: web.Request) -> web.Response:
        """POST /api/transcript - Push a recognized utterance into the input stream."""
        try:
            body = await request.json()
        except Exception:
            return _error_response("Invalid JSON body")

        if not isinstance(body, dict):
            return _error_response("Request body must be a JSON object")
        text = body.get("text")
        if not isinstance(text, str) or not text.strip():
            return _error_response("Field 'text' is required")

        push = getattr(self.orchestrator.source, "push", None)
        if push is None:
            return _error_response("Input source does not accept pushed transcripts", status=501)
        if not push(text):
            return _error_response("Not listening", status=409)

        return _json_response({"accepted": True, "state": self.orchestrator.state.value}, status=202)
