"""Aggregate reports page."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.api.deps import render
from boatrental.core import get_db
from boatrental.services.reports import ReportService

router = APIRouter(tags=["reports"])


@router.get("/reports", include_in_schema=False)
async def reports_page(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    """Paid income per month and reservations per boat."""
    service = ReportService(db)
    return render(
        request,
        "reports.html",
        {
            "income_by_month": await service.income_by_month(),
            "boat_occupancy": await service.boat_occupancy(),
        },
    )
