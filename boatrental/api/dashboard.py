"""Dashboard page and headline statistics."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.api.deps import render
from boatrental.core import get_db
from boatrental.middleware.session_guard import get_session_identity
from boatrental.schemas.rental import DashboardStats
from boatrental.services.reports import ReportService

router = APIRouter(tags=["dashboard"])

# JSON variant, mounted behind the JSON session guard
stats_router = APIRouter(tags=["dashboard"])


@router.get("/", include_in_schema=False)
async def dashboard(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    """Protected entry point: reservations, paid income and available boats."""
    stats = await ReportService(db).dashboard_stats()
    return render(
        request,
        "dashboard.html",
        {"stats": stats, "identity": get_session_identity(request)},
    )


@stats_router.get("/api/stats", response_model=DashboardStats)
async def get_stats(db: AsyncSession = Depends(get_db)) -> DashboardStats:
    """Dashboard figures as JSON."""
    return await ReportService(db).dashboard_stats()
