"""Fleet management pages."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.api.deps import FormError, parse_form, redirect, render
from boatrental.core import get_db
from boatrental.schemas.rental import BoatForm
from boatrental.services.rental import BoatService, RecordNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["boats"])


async def _render_boats(
    request: Request,
    db: AsyncSession,
    error: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    boats = await BoatService(db).list()
    return render(request, "boats.html", {"boats": boats, "error": error}, status_code)


@router.get("/boats", include_in_schema=False)
async def list_boats(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    return await _render_boats(request, db)


@router.post("/api/boats", include_in_schema=False)
async def create_boat(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    try:
        data = await parse_form(request, BoatForm)
    except FormError as e:
        return await _render_boats(request, db, e.message, status.HTTP_400_BAD_REQUEST)

    boat = await BoatService(db).create(data)
    await db.commit()
    logger.info(f"Created boat {boat.id}")
    return redirect("/boats")


@router.post("/api/boats/{boat_id}/availability", include_in_schema=False)
async def toggle_boat_availability(
    request: Request, boat_id: int, db: AsyncSession = Depends(get_db)
) -> Response:
    try:
        await BoatService(db).toggle_availability(boat_id)
    except RecordNotFoundError as e:
        return await _render_boats(request, db, str(e), status.HTTP_404_NOT_FOUND)
    await db.commit()
    return redirect("/boats")


@router.post("/api/boats/{boat_id}/delete", include_in_schema=False)
async def delete_boat(boat_id: int, db: AsyncSession = Depends(get_db)) -> Response:
    if await BoatService(db).delete(boat_id):
        await db.commit()
        logger.info(f"Deleted boat {boat_id}")
    return redirect("/boats")
