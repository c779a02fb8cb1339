"""HTTP entrypoint for the score ledger."""

from __future__ import annotations

import sys
import time
from typing import Any

from aiohttp import web

from scoreledger.config import ServerConfig
from scoreledger.ledger.errors import ConfigError, StoreUnavailable, ValidationError
from scoreledger.ledger.ledger import ScoreLedger
from scoreledger.ledger.ranked import RankedView
from scoreledger.ledger.records import Submission
from scoreledger.log import set_debug, setup_logger
from scoreledger.storage.base import ScoreStore
from scoreledger.storage.memory import MemoryStore
from scoreledger.storage.sqlite import SqliteStore

logger = setup_logger(__name__)


def build_store(config: ServerConfig) -> ScoreStore:
    if config.store_backend == "memory":
        return MemoryStore()
    return SqliteStore(config.sqlite_path, timeout=config.store_timeout_sec)


class LedgerService:
    def __init__(self, config: ServerConfig, store: ScoreStore | None = None):
        self.config = config
        self.start_time = time.time()

        self.store = store if store is not None else build_store(config)
        self.ledger = ScoreLedger(self.store)
        self.ranked = RankedView(self.store, default_limit=config.default_limit, max_limit=config.max_limit)

    async def start(self) -> None:
        await self.store.open()
        logger.info("score ledger %s started (%s store)", self.config.server_version, self.config.store_backend)

    async def stop(self) -> None:
        await self.store.close()
        logger.info("score ledger stopped")

    def version_payload(self) -> dict[str, Any]:
        return {
            "service": "score-ledger",
            "serverVersion": self.config.server_version,
            "uptimeSec": time.time() - self.start_time,
        }


def _cors_headers(config: ServerConfig, origin: str | None) -> dict[str, str]:
    if config.cors_allow_all:
        return {"Access-Control-Allow-Origin": "*"}
    if origin and origin in config.cors_allowed_origins:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    if request.method == "OPTIONS":
        headers = {
            **_cors_headers(request.app["config"], request.headers.get("Origin")),
            "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
            "Access-Control-Allow-Headers": "Origin, Content-Type, Accept",
            "Access-Control-Max-Age": "86400",
        }
        return web.Response(status=204, headers=headers)

    cors = _cors_headers(request.app["config"], request.headers.get("Origin"))
    try:
        resp = await handler(request)
    except web.HTTPException as e:
        e.headers.update(cors)
        raise
    resp.headers.update(cors)
    return resp


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except ValidationError as e:
        return web.json_response({"ok": False, "error": str(e)}, status=400)
    except StoreUnavailable as e:
        logger.warning("%s %s failed: %s", request.method, request.path, e)
        return web.json_response({"ok": False, "error": str(e)}, status=503)


def _parse_limit(raw: str | None) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("limit must be a positive integer") from None


def create_app(config: ServerConfig, store: ScoreStore | None = None) -> web.Application:
    app = web.Application(middlewares=[cors_middleware, error_middleware])
    svc = LedgerService(config, store=store)

    app["config"] = config
    app["svc"] = svc

    async def on_startup(_: web.Application):
        await svc.start()

    async def on_cleanup(_: web.Application):
        await svc.stop()

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    async def root(_: web.Request):
        return web.json_response(
            {
                "ok": True,
                **svc.version_payload(),
                "records": await svc.store.count(),
                "endpoints": {
                    "health": "/healthcheck",
                    "submit": "/updatescore",
                    "leaderboard": "/getall",
                },
            }
        )

    async def healthcheck(_: web.Request):
        return web.Response(text="OK")

    async def update_score(request: web.Request):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("body must be JSON") from None
        sub = Submission.parse(body)
        outcome = await svc.ledger.submit(sub.userName, sub.score)
        return web.json_response({"ok": True, "outcome": outcome.value})

    async def get_all(request: web.Request):
        limit = _parse_limit(request.query.get("limit"))
        top = await svc.ranked.top_scores(limit)
        return web.json_response([r.to_json() for r in top])

    async def preflight(_: web.Request):
        # Answered by cors_middleware; the route only makes OPTIONS resolvable.
        return web.Response(status=204)

    app.router.add_get("/", root)
    app.router.add_get("/healthcheck", healthcheck)
    app.router.add_post("/updatescore", update_score)
    app.router.add_get("/getall", get_all)
    app.router.add_route("OPTIONS", "/{tail:.*}", preflight)

    return app


def main() -> None:
    try:
        config = ServerConfig.from_env()
    except ConfigError as e:
        logger.error("invalid configuration: %s", e)
        sys.exit(1)
    set_debug(config.debug)
    app = create_app(config)
    try:
        web.run_app(app, host=config.host, port=config.port)
    except StoreUnavailable as e:
        logger.error("store unavailable at startup: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
