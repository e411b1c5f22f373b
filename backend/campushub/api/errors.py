"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from campushub.api.request_id import get_request_id
from campushub.domain.errors import CampusHubError
from campushub.obs import metrics as obs_metrics

log = logging.getLogger(__name__)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(CampusHubError)
    async def domain_exc_handler(request: Request, exc: CampusHubError):  # type: ignore[override]
        rid = get_request_id(request)
        obs_metrics.inc_domain_reject(exc.detail)
        if exc.retriable:
            log.warning("store_error", extra={"reason": exc.detail}, exc_info=exc)
        payload = {"detail": exc.detail, "request_id": rid}
        headers = {"Retry-After": "1"} if exc.retriable else None
        return JSONResponse(status_code=exc.status_code, content=payload, headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": exc.detail, "request_id": rid}
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        rid = get_request_id(request)
        payload = {"detail": "validation_error", "errors": jsonable_encoder(exc.errors()), "request_id": rid}
        return JSONResponse(status_code=422, content=payload)
