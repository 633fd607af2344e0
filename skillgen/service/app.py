"""FastAPI application entrypoint for skillgen service mode."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..errors import StackBuildError
from ..orchestrator import Orchestrator


class DetectRequest(BaseModel):
    path: str


class DetectResponse(BaseModel):
    tech_stack: Dict[str, Any]


class GenerateRequest(BaseModel):
    path: str
    dry_run: bool = False
    output_dir: Optional[str] = None


class GenerateResponse(BaseModel):
    report: Dict[str, Any]
    persisted: List[Dict[str, Any]]
    dry_run: bool


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing skillgen operations."""

    app = FastAPI(title="Skillgen Service", version=__version__)

    async def get_orchestrator() -> Orchestrator:
        # Fresh orchestrator per request; run state is not shared between requests.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/detect", response_model=DetectResponse)
    async def detect(
        payload: DetectRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> DetectResponse:
        stack = await orchestrator.detect(payload.path)
        return DetectResponse(tech_stack=stack.to_dict())

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        output_dir = Path(payload.output_dir) if payload.output_dir else None
        result = await orchestrator.run(
            payload.path,
            output_dir=output_dir,
            dry_run=payload.dry_run,
        )
        return GenerateResponse(
            report=result.report.to_dict(),
            persisted=[entry.to_dict() for entry in result.persisted],
            dry_run=payload.dry_run,
        )

    @app.exception_handler(StackBuildError)
    async def stack_build_error_handler(_: Any, exc: StackBuildError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
