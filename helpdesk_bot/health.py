import logging
import time
from typing import Any, Dict, Optional

import discord
from aiohttp import web


def build_health_payload(started_at: float, now: Optional[float] = None) -> Dict[str, Any]:
    current = time.monotonic() if now is None else now
    return {
        "status": "Bot is running!",
        "uptime": round(max(0.0, current - started_at), 3),
        "timestamp": discord.utils.utcnow().isoformat(),
    }


class HealthServer:
    """Unauthenticated ``GET /`` endpoint for uptime monitors."""

    def __init__(self) -> None:
        self.started_at = time.monotonic()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self.handle_root)
        return app

    async def handle_root(self, _: web.Request) -> web.Response:
        return web.json_response(build_health_payload(self.started_at))

    async def start(self, *, host: str = "0.0.0.0", port: int) -> None:
        if self._runner is not None:
            return
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, host=host, port=port)
        await self._site.start()
        logging.info("Health check server running on port %s", port)

    async def stop(self) -> None:
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        self._site = None
