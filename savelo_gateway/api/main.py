"""Gateway application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from savelo_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from savelo_gateway.api.v1 import levels, plan, wallet
from savelo_gateway.config import settings
from savelo_gateway.infrastructure.database.session import init_db
from savelo_gateway.infrastructure.observability.logging import setup_logging
from savelo_gateway.services.plans import MutationTracker

setup_logging(settings.log_level)


def create_app(tracker: MutationTracker | None = None) -> FastAPI:
    """
    Build the gateway.

    `tracker` is shared by every request of this app; tests pass one with
    no re-fetch delays.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db()
        yield
        await app.state.tracker.aclose()

    app = FastAPI(
        title="Savelo Gateway",
        description="Daily saving challenge: plan lifecycle, penalties and rewards",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.tracker = tracker or MutationTracker()

    # Request id must exist before metrics and handlers run
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "ledger": settings.ledger_api_base}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for module, tag in ((levels, "levels"), (plan, "plans"), (wallet, "wallets")):
        app.include_router(module.router, prefix="/v1", tags=[tag])

    return app


app = create_app()
