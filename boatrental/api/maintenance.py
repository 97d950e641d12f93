"""Maintenance log pages."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.api.deps import FormError, parse_form, redirect, render
from boatrental.core import get_db
from boatrental.schemas.rental import MaintenanceForm
from boatrental.services.rental import BoatService, MaintenanceService, RecordNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["maintenance"])


async def _render_maintenance(
    request: Request,
    db: AsyncSession,
    error: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    context = {
        "records": await MaintenanceService(db).list(),
        "boats": await BoatService(db).list(),
        "error": error,
    }
    return render(request, "maintenance.html", context, status_code)


@router.get("/maintenance", include_in_schema=False)
async def list_maintenance(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    return await _render_maintenance(request, db)


@router.post("/api/maintenance", include_in_schema=False)
async def create_maintenance(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    try:
        data = await parse_form(request, MaintenanceForm)
        record = await MaintenanceService(db).create(data)
    except FormError as e:
        return await _render_maintenance(request, db, e.message, status.HTTP_400_BAD_REQUEST)
    except RecordNotFoundError as e:
        return await _render_maintenance(request, db, str(e), status.HTTP_400_BAD_REQUEST)

    await db.commit()
    logger.info(f"Logged maintenance {record.id} for boat {record.boat_id}")
    return redirect("/maintenance")


@router.post("/api/maintenance/{maintenance_id}/complete", include_in_schema=False)
async def complete_maintenance(
    request: Request, maintenance_id: int, db: AsyncSession = Depends(get_db)
) -> Response:
    try:
        await MaintenanceService(db).complete(maintenance_id)
    except RecordNotFoundError as e:
        return await _render_maintenance(request, db, str(e), status.HTTP_404_NOT_FOUND)
    await db.commit()
    return redirect("/maintenance")
