"""FastAPI application.

- Bearer-token authentication, role/ownership authorization via one policy module
- Request-id propagation and structured JSON access logs
- Uniform error bodies: {"error": {"code", "message"}}
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from nippo.api.router import router as api_router
from nippo.core.errors import ApiError, ErrorCode, error_body, invalid_input
import nippo.models as _models  # noqa: F401  (register all ORM models deterministically)
from nippo.web.pages import router as pages_router


logger = logging.getLogger("nippo")
logger.setLevel(logging.INFO)


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = invalid_input(list(exc.errors()), skip_loc_prefix=True)
    return JSONResponse(status_code=err.status_code, content=err.to_body())


def create_app() -> FastAPI:
    app = FastAPI(
        title="nippo Daily Report API",
        version="1.0.0",
        openapi_url="/openapi.json",
        docs_url=None,
        redoc_url=None,
        description="Sales daily reports, visit records and manager comments.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(api_router)
    app.include_router(pages_router)

    @app.middleware("http")
    async def request_id_and_access_log(request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.time()
        try:
            response = await call_next(request)
        except OperationalError:
            logger.exception("Database unavailable", extra={"request_id": request_id})
            return JSONResponse(
                status_code=503,
                content=error_body(ErrorCode.SERVICE_UNAVAILABLE, "サービスが一時的に利用できません"),
                headers={"x-request-id": request_id},
            )
        except Exception:  # noqa: BLE001
            logger.exception("Unhandled error", extra={"request_id": request_id})
            return JSONResponse(
                status_code=500,
                content=error_body(ErrorCode.INTERNAL_SERVER_ERROR, "サーバーエラーが発生しました"),
                headers={"x-request-id": request_id},
            )

        duration_ms = int((time.time() - start) * 1000)
        response.headers["x-request-id"] = request_id

        # Structured access log (no credentials).
        logger.info(
            json.dumps(
                {
                    "event": "access",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": duration_ms,
                }
            )
        )
        return response

    return app


app = create_app()
