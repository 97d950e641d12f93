"""Aggregate figures for the dashboard and reports pages."""

from decimal import Decimal

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.models import Boat, Invoice, Reservation
from boatrental.schemas.rental import BoatOccupancy, DashboardStats, MonthlyIncome


class ReportService:
    """Read-only aggregate queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _month_bucket(self):
        # strftime only exists on SQLite; PostgreSQL formats with to_char
        if self.db.get_bind().dialect.name == "sqlite":
            return func.strftime("%Y-%m", Invoice.date)
        return func.to_char(Invoice.date, "YYYY-MM")

    async def dashboard_stats(self) -> DashboardStats:
        reservations_result = await self.db.execute(select(func.count(Reservation.id)))
        income_result = await self.db.execute(
            select(func.coalesce(func.sum(Invoice.amount), 0)).where(Invoice.paid.is_(True))
        )
        boats_result = await self.db.execute(
            select(func.count(Boat.id)).where(Boat.available.is_(True))
        )
        return DashboardStats(
            total_reservations=reservations_result.scalar() or 0,
            paid_income=Decimal(str(income_result.scalar() or 0)),
            available_boats=boats_result.scalar() or 0,
        )

    async def income_by_month(self) -> list[MonthlyIncome]:
        """Paid invoice totals per calendar month, newest month first."""
        month = self._month_bucket().label("month")
        result = await self.db.execute(
            select(month, func.sum(Invoice.amount).label("total"))
            .where(Invoice.paid.is_(True))
            .group_by(month)
            .order_by(desc("month"))
        )
        return [
            MonthlyIncome(month=row.month, total=Decimal(str(row.total or 0))) for row in result
        ]

    async def boat_occupancy(self) -> list[BoatOccupancy]:
        """Reservation count for every boat, busiest first."""
        reservations = func.count(Reservation.id).label("reservations")
        result = await self.db.execute(
            select(Boat.name, reservations)
            .outerjoin(Reservation, Reservation.boat_id == Boat.id)
            .group_by(Boat.id, Boat.name)
            .order_by(desc("reservations"), Boat.name)
        )
        return [BoatOccupancy(name=row.name, reservations=row.reservations) for row in result]
