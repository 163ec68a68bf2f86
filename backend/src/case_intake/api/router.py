"""FastAPI application exposing the case intake endpoint."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, Dict
from uuid import uuid4

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..adapters.notion import NotionClient, RecordCreationError, RecordCreator
from ..core.config import ConfigurationError, Settings, load_settings
from ..core.metrics import REGISTRY, REQUEST_LATENCY, SUBMISSIONS, configure_logging
from ..core.translator import CaseTranslator
from ..core.validation import InvalidBodyError, MissingFieldsError

logger = structlog.get_logger(__name__)

CASES_PATH = "/api/cases"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Accept",
}


def _failure(
    status_code: int,
    error: str,
    *,
    headers: Dict[str, str] | None = None,
    **details: Any,
) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": error}
    content.update({key: value for key, value in details.items() if value is not None})
    return JSONResponse(content, status_code=status_code, headers=headers)


def get_translator(request: Request) -> CaseTranslator:
    return request.app.state.translator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise InvalidBodyError("request body is not valid JSON") from exc


def create_app(settings: Settings | None = None, creator: RecordCreator | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    owned_client = NotionClient(settings) if creator is None else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owned_client is not None:
            await owned_client.close()

    app = FastAPI(title="Case Intake Service", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.translator = CaseTranslator(settings, creator or owned_client)

    @app.middleware("http")
    async def _request_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        for header, value in CORS_HEADERS.items():
            response.headers[header] = value
        return response

    @app.options(CASES_PATH)
    async def preflight_case() -> Response:
        return Response(status_code=200)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code == 405:
            return _failure(405, "Method not allowed", headers=exc.headers)
        return await http_exception_handler(request, exc)

    @app.post(CASES_PATH)
    async def create_case(
        request: Request,
        translator: CaseTranslator = Depends(get_translator),
    ) -> JSONResponse:
        with REQUEST_LATENCY.labels(endpoint="create_case").time():
            try:
                body = await _read_body(request)
                result = await translator.submit(body)
            except ConfigurationError as exc:
                SUBMISSIONS.labels(outcome="config_error").inc()
                logger.error("case_config_error", error=exc.error)
                return _failure(500, exc.error, message=exc.message, valueSeen=exc.value_seen)
            except InvalidBodyError as exc:
                SUBMISSIONS.labels(outcome="invalid").inc()
                logger.warning("case_validation_failed", reason=str(exc))
                return _failure(400, "Invalid JSON body", message=str(exc))
            except MissingFieldsError as exc:
                SUBMISSIONS.labels(outcome="invalid").inc()
                logger.warning("case_validation_failed", missing=exc.missing, received_keys=exc.received_keys)
                return _failure(
                    400,
                    "Missing required fields",
                    missing=exc.missing,
                    required=exc.required,
                    receivedKeys=exc.received_keys,
                )
            except RecordCreationError as exc:
                SUBMISSIONS.labels(outcome="upstream_error").inc()
                logger.error("case_record_failed", code=exc.code, status=exc.status)
                return _failure(
                    500,
                    "Notion write failed",
                    message=exc.message,
                    code=exc.code,
                    status=exc.status,
                    body=exc.body,
                )
            except Exception as exc:
                SUBMISSIONS.labels(outcome="upstream_error").inc()
                logger.exception("case_record_failed")
                return _failure(500, "Notion write failed", message=str(exc) or exc.__class__.__name__)

        SUBMISSIONS.labels(outcome="created").inc()
        content: Dict[str, Any] = {
            "success": True,
            "notionPageId": result.record.id,
            "CaseID": result.case_id,
        }
        if result.record.url:
            content["url"] = result.record.url
        return JSONResponse(content)

    @app.get("/healthz")
    async def healthz(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
        return {
            "status": "ok",
            "notion_configured": bool(settings.notion_token and settings.database_id),
            "required_fields": list(settings.required_fields),
        }

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

    return app


__all__ = ["CORS_HEADERS", "create_app"]
