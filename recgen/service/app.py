"""FastAPI application entrypoint for recgen service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import RecgenError
from ..orchestrator import Orchestrator, RoundResult
from ..scanner import ManifestDocument
from ..sinks import MemorySink


class GenerateRequest(BaseModel):
    manifest: ManifestDocument
    layout: Optional[Literal["module", "bundle"]] = None


class FailedEntry(BaseModel):
    name: str
    reason: str
    detail: str = ""


class InvalidUsageEntry(BaseModel):
    variant: str
    expected_kinds: List[str]
    elements: List[str]


class GenerateResponse(BaseModel):
    emitted: List[str]
    skipped: List[str]
    failed: List[FailedEntry]
    invalid_usage: List[InvalidUsageEntry]
    sources: Dict[str, str]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing recgen operations."""

    app = FastAPI(title="recgen Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # A fresh orchestrator per request keeps emit-once state request-local.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        def _run() -> RoundResult:
            scan = orchestrator.scanner.scan_document(payload.manifest)
            return orchestrator.run_scan(scan, sink=MemorySink(), layout=payload.layout)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        report = result.report
        return GenerateResponse(
            emitted=report.emitted,
            skipped=report.skipped,
            failed=[FailedEntry(name=item.name, reason=item.reason, detail=item.detail) for item in report.failed],
            invalid_usage=[
                InvalidUsageEntry(
                    variant=group.variant.value,
                    expected_kinds=[kind.value for kind in group.expected_kinds],
                    elements=list(group.elements),
                )
                for group in result.diagnostics
            ],
            sources={source.path: source.text for source in result.sources},
        )

    @app.exception_handler(RecgenError)
    async def recgen_error_handler(
        _: Any, exc: RecgenError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
