"""Departure operations — FastAPI application.

Serves the dashboard worklist, the group detail view, project notes and
the group / milestone edits over HTTP.

Run:
    uvicorn modules.operations.api:app --port 8080
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .catalog import CatalogSource, InMemoryCatalog, load_catalog
from .config import get_config
from .dashboard import list_departures
from .detail import build_group_detail
from .errors import (
    InvalidAmountError,
    InvalidDateError,
    InvalidPatchError,
    InvalidTransitionError,
    OperationsError,
)
from .schemas import (
    DepartureListResponse,
    GroupPatch,
    MilestonePatch,
    NotesPatch,
    ProjectResponse,
    UpdateResponse,
    detail_to_dict,
    row_out,
)
from .serialization import group_to_dict
from .service import OperationsService, UpdateResult
from .storage import create_repository
from .temporal import as_calendar_date

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def _reference_date(today: Optional[str]) -> date:
    if not today:
        return date.today()
    return as_calendar_date(today)


def _result_or_raise(result: UpdateResult) -> UpdateResponse:
    if result.ok:
        return UpdateResponse(project_id=result.project.id, group=group_to_dict(result.group))
    if isinstance(result.error, InvalidTransitionError):
        raise HTTPException(status_code=409, detail=str(result.error))
    raise HTTPException(status_code=404, detail=str(result.error))


def create_app(
    service: Optional[OperationsService] = None,
    catalog: Optional[CatalogSource] = None,
    config=None,
) -> FastAPI:
    """Build the API around a service and catalog.

    Missing pieces are created on startup from the active configuration.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = config or get_config()
        app.state.config = cfg
        app.state.service = service or OperationsService(
            create_repository(cfg), cfg.default_land_currency
        )
        if catalog is not None:
            app.state.catalog = catalog
        elif cfg.catalog_path:
            app.state.catalog = load_catalog(cfg.catalog_path)
        else:
            app.state.catalog = InMemoryCatalog()
        if app.state.service.catalog is None:
            app.state.service.catalog = app.state.catalog
        logger.info(f"Operations API v{app.version} started")
        logger.info(f"Storage backend: {app.state.service.repository.__class__.__name__}")
        yield
        logger.info("Shutting down")

    app = FastAPI(
        title="Departure Operations",
        description="Post-sale operations for group departures",
        version=VERSION,
        lifespan=lifespan,
    )

    @app.exception_handler(InvalidPatchError)
    @app.exception_handler(InvalidAmountError)
    @app.exception_handler(InvalidDateError)
    async def invalid_input(request: Request, exc: OperationsError):
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # -----------------------------------------------------------------------
    # Health Check
    # -----------------------------------------------------------------------

    @app.get("/health")
    async def health(request: Request):
        service_ = getattr(request.app.state, "service", None)
        return {
            "status": "healthy",
            "service": "departure-operations",
            "version": VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "storage": service_.repository.__class__.__name__ if service_ else "not initialized",
        }

    # -----------------------------------------------------------------------
    # Dashboard
    # -----------------------------------------------------------------------

    @app.get("/departures", response_model=DepartureListResponse)
    async def departures(request: Request, role: Optional[str] = None, today: Optional[str] = None):
        """Departure worklist for ``role``, soonest first."""
        state = request.app.state
        ref = _reference_date(today)
        rows = list_departures(
            state.service.list_projects(),
            state.catalog.list_packages(),
            role,
            ref,
            state.config,
        )
        out = [row_out(r) for r in rows]
        return DepartureListResponse(reference_date=ref, role=role, count=len(out), departures=out)

    # -----------------------------------------------------------------------
    # Group detail
    # -----------------------------------------------------------------------

    @app.get("/projects/{project_id}/groups/{group_id}")
    async def group_detail(request: Request, project_id: str, group_id: str, today: Optional[str] = None):
        state = request.app.state
        project = state.service.get_project(project_id)
        group = project.group(group_id) if project else None
        if group is None:
            raise HTTPException(status_code=404, detail=f"Departure group {project_id}/{group_id} not found")
        package = state.catalog.get_package(project.package_id)
        if package is None:
            raise HTTPException(status_code=404, detail=f"Package {project.package_id} not found")
        detail = build_group_detail(
            project, group, package,
            state.catalog.bookings_for(package.id),
            _reference_date(today),
            state.config,
        )
        return detail_to_dict(detail)

    # -----------------------------------------------------------------------
    # Edits
    # -----------------------------------------------------------------------

    @app.patch("/projects/{project_id}", response_model=ProjectResponse)
    async def patch_project(request: Request, project_id: str, patch: NotesPatch):
        result = request.app.state.service.update_notes(project_id, patch.notes)
        if not result.ok:
            raise HTTPException(status_code=404, detail=str(result.error))
        return ProjectResponse(project_id=result.project.id, notes=result.project.notes)

    @app.patch("/projects/{project_id}/groups/{group_id}", response_model=UpdateResponse)
    async def patch_group(request: Request, project_id: str, group_id: str, patch: GroupPatch):
        result = request.app.state.service.update_group(project_id, group_id, patch.changes())
        return _result_or_raise(result)

    @app.patch("/projects/{project_id}/groups/{group_id}/milestones/{key}", response_model=UpdateResponse)
    async def patch_milestone(request: Request, project_id: str, group_id: str, key: str, patch: MilestonePatch):
        result = request.app.state.service.update_milestone(project_id, group_id, key, patch.changes())
        return _result_or_raise(result)

    @app.post("/projects/{project_id}/groups/{group_id}/validate", response_model=UpdateResponse)
    async def validate_group(request: Request, project_id: str, group_id: str, today: Optional[str] = None):
        result = request.app.state.service.validate_group(project_id, group_id, _reference_date(today))
        return _result_or_raise(result)

    return app


app = create_app()
