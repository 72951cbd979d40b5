#!/usr/bin/env python3
"""
dAUXimity signal server - entry point
WebSocket signaling + room lifecycle + rate limiting
"""
import logging
import time
from collections import defaultdict
from typing import Optional

from aiohttp import web

from dauximity.api import api_rooms, health, ws_signal
from dauximity.config import Settings
from dauximity.hub import SignalHub

logger = logging.getLogger("dauximity")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@web.middleware
async def rate_limit_middleware(request, handler):
    """Per-IP rate limiting for plain HTTP routes"""
    # The signaling WebSocket is long-lived and exempt
    if request.path == "/ws":
        return await handler(request)

    limit = request.app["settings"].rate_limit
    store = request.app["rate_limit_store"]
    ip = request.remote
    now = time.time()

    # Clean old entries, dropping IPs with nothing left in the window
    for key in list(store):
        recent = [t for t in store[key] if now - t < 60]
        if recent:
            store[key] = recent
        else:
            del store[key]

    if len(store[ip]) >= limit:
        logger.warning(f"Rate limit exceeded for {ip}")
        return web.json_response(
            {"ok": False, "error": "Rate limit exceeded"},
            status=429
        )

    store[ip].append(now)
    return await handler(request)


async def close_sessions(app: web.Application) -> None:
    logger.info("🛑 Shutting down, closing %d sessions", len(app["hub"].registry))
    await app["hub"].shutdown()


def create_app(settings: Optional[Settings] = None) -> web.Application:
    """Create and configure the aiohttp application"""
    settings = settings or Settings.from_env()
    app = web.Application(middlewares=[rate_limit_middleware])
    app["settings"] = settings
    app["hub"] = SignalHub(settings)
    app["rate_limit_store"] = defaultdict(list)

    app.router.add_get("/", health)
    app.router.add_get("/rooms", api_rooms)
    app.router.add_get("/ws", ws_signal)

    app.on_shutdown.append(close_sessions)

    logger.info("📡 dAUXimity signal server ready • %d rooms loaded", len(app["hub"].store))
    return app


def main():
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    app = create_app(settings)

    logger.info(f"🚀 Starting server on {settings.host}:{settings.port}")
    web.run_app(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
