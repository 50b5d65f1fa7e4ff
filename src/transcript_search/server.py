"""
FastAPI server for transcript search.

Exposes the ``search_embeddings`` tool (listing and calls with stable error
codes), a typed search endpoint and a health check.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import SearchConfig
from .errors import ErrorCode, TranscriptSearchError, ValidationError
from .logging_utils import configure_logging
from .models import parse_search_request
from .service import TranscriptSearchService

logger = logging.getLogger(__name__)

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.INVALID_PARAMS: 400,
    ErrorCode.METHOD_NOT_FOUND: 404,
    ErrorCode.INTERNAL_ERROR: 500,
}


def _error_response(code: ErrorCode, message: str) -> JSONResponse:
    return JSONResponse(
        {"error": {"code": code.value, "message": message}},
        status_code=_STATUS_BY_CODE[code],
    )


def _get_service(request: Request) -> TranscriptSearchService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise TranscriptSearchError("Search service is not initialized")
    return service


async def _read_arguments(request: Request) -> Any:
    body = await request.body()
    if not body:
        return {}
    try:
        return await request.json()
    except ValueError as exc:
        raise ValidationError(f"Invalid parameters: request body is not JSON ({exc})") from exc


@asynccontextmanager
async def _lifespan(app: FastAPI):
    owned = getattr(app.state, "service", None) is None
    if owned:
        configure_logging()
        app.state.service = TranscriptSearchService.from_config(SearchConfig.from_env())
    # A store that cannot answer SELECT 1 aborts startup.
    await asyncio.to_thread(app.state.service.check_connection)
    try:
        yield
    finally:
        if owned:
            app.state.service.close()
            app.state.service = None


def create_app(service: TranscriptSearchService | None = None) -> FastAPI:
    """Build the FastAPI app, optionally around an already constructed service."""
    app = FastAPI(
        title="TranscriptSearch",
        description="Vector similarity search over podcast transcript segments",
        lifespan=_lifespan,
    )
    app.state.service = service

    @app.get("/api/health")
    async def health(request: Request):
        """Report whether the store answers queries."""
        try:
            service = _get_service(request)
            await asyncio.to_thread(service.check_connection)
        except TranscriptSearchError as exc:
            return JSONResponse({"status": "error", "message": exc.message}, status_code=503)
        return {"status": "ok"}

    @app.get("/api/tools")
    async def list_tools(request: Request):
        """List the available tools and their input schemas."""
        try:
            service = _get_service(request)
        except TranscriptSearchError as exc:
            return _error_response(exc.code, exc.message)
        return {"tools": service.list_tools()}

    @app.post("/api/tools/{name}")
    async def call_tool(name: str, request: Request):
        """Call a tool by name with the JSON body as its arguments."""
        try:
            service = _get_service(request)
            arguments = await _read_arguments(request)
            outcome = await asyncio.to_thread(service.call_tool, name, arguments)
        except TranscriptSearchError as exc:
            if exc.code is ErrorCode.INTERNAL_ERROR:
                logger.exception("Error processing search request")
            return _error_response(exc.code, exc.message)
        except Exception as exc:
            logger.exception("Unexpected error processing search request")
            return _error_response(
                ErrorCode.INTERNAL_ERROR, f"Error processing search request: {exc}"
            )

        return {
            "content": [{"type": "text", "text": outcome.to_text()}],
            "degraded": outcome.degraded,
        }

    @app.post("/api/search")
    async def search(request: Request):
        """Search transcript segments and return structured results."""
        try:
            service = _get_service(request)
            search_request = parse_search_request(await _read_arguments(request))
            outcome = await asyncio.to_thread(service.run, search_request)
        except TranscriptSearchError as exc:
            if exc.code is ErrorCode.INTERNAL_ERROR:
                logger.exception("Error processing search request")
            return _error_response(exc.code, exc.message)
        except Exception as exc:
            logger.exception("Unexpected error processing search request")
            return _error_response(
                ErrorCode.INTERNAL_ERROR, f"Error processing search request: {exc}"
            )

        return {
            "question": search_request.question,
            "mode": outcome.capability.value,
            "degraded": outcome.degraded,
            "results": outcome.to_dicts(),
        }

    return app


app = create_app()


def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the FastAPI server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
