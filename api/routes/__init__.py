from __future__ import annotations

from fastapi import APIRouter

from api.routes import account, cursor, feed, health, options, queue, well_known


def get_api_router() -> APIRouter:
    router = APIRouter()

    router.include_router(health.router, tags=["health"])
    router.include_router(well_known.router, tags=["identity"])
    router.include_router(feed.router, tags=["feed"])
    router.include_router(cursor.router, tags=["ingestion"])
    router.include_router(queue.router, tags=["ingestion"])
    router.include_router(account.router, tags=["account"])
    # last: catch-all preflight
    router.include_router(options.router)

    return router
