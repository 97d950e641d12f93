"""Reservation pages."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.api.deps import FormError, parse_form, redirect, render
from boatrental.core import get_db
from boatrental.schemas.rental import ReservationForm
from boatrental.services.rental import (
    BoatService,
    ClientService,
    RecordNotFoundError,
    ReservationService,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reservations"])


async def _render_reservations(
    request: Request,
    db: AsyncSession,
    error: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    context = {
        "reservations": await ReservationService(db).list(),
        "clients": await ClientService(db).list(),
        "boats": await BoatService(db).list(),
        "error": error,
    }
    return render(request, "reservations.html", context, status_code)


@router.get("/reservations", include_in_schema=False)
async def list_reservations(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    return await _render_reservations(request, db)


@router.post("/api/reservations", include_in_schema=False)
async def create_reservation(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    try:
        data = await parse_form(request, ReservationForm)
        reservation = await ReservationService(db).create(data)
    except FormError as e:
        return await _render_reservations(request, db, e.message, status.HTTP_400_BAD_REQUEST)
    except RecordNotFoundError as e:
        return await _render_reservations(request, db, str(e), status.HTTP_400_BAD_REQUEST)

    await db.commit()
    logger.info(f"Created reservation {reservation.id}")
    return redirect("/reservations")


@router.post("/api/reservations/{reservation_id}/delete", include_in_schema=False)
async def delete_reservation(reservation_id: int, db: AsyncSession = Depends(get_db)) -> Response:
    if await ReservationService(db).delete(reservation_id):
        await db.commit()
        logger.info(f"Deleted reservation {reservation_id}")
    return redirect("/reservations")
