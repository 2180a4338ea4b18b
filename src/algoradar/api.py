from __future__ import annotations

import time as time_module

from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from algoradar import __version__
from algoradar.app.wiring import ServerComponents, build_server_components
from algoradar.build_contests_payload__api import (
    CORS_HEADERS,
    _build_contests_payload,
    _rate_limited_payload,
    _service_unavailable_payload,
)
from algoradar.errors import ServiceUnavailableError
from algoradar.extract_client_identity__request import _extract_client_identity
from algoradar.get_health__api import health as _health
from algoradar.manage_lifespan__fastapi import lifespan
from algoradar.utils.logger import get_logger

logger = get_logger(__name__)

CONTESTS_PATH = "/api/contests"

router = APIRouter()


def get_components(request: Request) -> ServerComponents:
    return request.app.state.components


@router.get("/api/health")
def health() -> dict[str, str]:
    return _health()


@router.options(CONTESTS_PATH)
def contests_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@router.api_route(
    CONTESTS_PATH,
    methods=["POST", "PUT", "PATCH", "DELETE", "HEAD", "TRACE"],
)
def contests_method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={"error": "Method not allowed"},
        headers=CORS_HEADERS,
    )


@router.get(CONTESTS_PATH)
def contests(
    request: Request,
    components: ServerComponents = Depends(get_components),
) -> JSONResponse:
    started = time_module.monotonic()
    decision = components.limiter.check(_extract_client_identity(request))
    if not decision.allowed:
        retry_after = decision.retry_after or components.settings.rate_limit.retry_after_s
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=_rate_limited_payload(retry_after),
            headers={**CORS_HEADERS, "Retry-After": str(retry_after)},
        )
    try:
        result = components.cache.get_contests()
    except ServiceUnavailableError as exc:
        logger.error("Error: %s", exc.cause or exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=_service_unavailable_payload(),
            headers=CORS_HEADERS,
        )
    response_time_ms = int((time_module.monotonic() - started) * 1000)
    logger.info(
        "Served %s contests (cached=%s stale=%s) in %sms",
        len(result.contests),
        result.cached,
        result.stale,
        response_time_ms,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=_build_contests_payload(result, response_time_ms),
        headers=CORS_HEADERS,
    )


def create_app(components: ServerComponents | None = None) -> FastAPI:
    """Create the API app around one set of shared server components."""
    app = FastAPI(title="AlgoRadar", version=__version__, lifespan=lifespan)
    app.state.components = components or build_server_components()
    app.include_router(router)
    return app


app = create_app()
