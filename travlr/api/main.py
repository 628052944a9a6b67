"""FastAPI application."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from travlr import __version__
from travlr.api.schemas import HealthResponse, PlanTripRequest
from travlr.domain.exceptions import InvalidAgentSubset
from travlr.orchestration.orchestrator import TripOrchestrator, make_orchestrator

_api_logger = logging.getLogger("travlr.api")

load_dotenv()

app = FastAPI(
    title="travlr",
    version=__version__,
    docs_url="/docs" if os.getenv("ENABLE_DOCS", "false").lower() == "true" else None,
    redoc_url=None,
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store"
        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

_orchestrator: TripOrchestrator | None = None


def get_orchestrator() -> TripOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = make_orchestrator()
    return _orchestrator


def set_orchestrator(orchestrator: TripOrchestrator | None) -> None:
    """Swap the process-wide orchestrator; ``None`` rebuilds it from env on next use."""
    global _orchestrator
    _orchestrator = orchestrator


@app.get("/health", response_model=HealthResponse)
def health():
    orchestrator = get_orchestrator()
    return HealthResponse(
        status="ok",
        version=__version__,
        agents=sorted(role.value for role in orchestrator.scheduler.agents),
        persistence=getattr(orchestrator.repository, "backend", "unknown"),
    )


@app.post("/trips/plan")
async def plan_trip(req: PlanTripRequest):
    try:
        response = await get_orchestrator().run(req.trip, req.agents)
    except InvalidAgentSubset as exc:
        _api_logger.warning("rejected agent subset: %s", exc)
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "unknown_agents": list(exc.unknown)},
        )
    # Non-finite ratios serialize as null.
    return Response(content=response.model_dump_json(), media_type="application/json")
