"""Rental services - business logic for the back-office records."""

import builtins
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from boatrental.models import Boat, CashTransaction, Client, Invoice, Maintenance, Reservation
from boatrental.schemas.rental import (
    BoatForm,
    CashTransactionForm,
    ClientForm,
    InvoiceForm,
    MaintenanceForm,
    ReservationForm,
)


class RecordNotFoundError(Exception):
    """A referenced record does not exist."""

    def __init__(self, kind: str, record_id: int):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class _RecordService:
    model: Any = None

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, record_id: int) -> Any:
        return await self.db.get(self.model, record_id)

    async def require(self, record_id: int) -> Any:
        record = await self.get(record_id)
        if record is None:
            raise RecordNotFoundError(self.model.__name__, record_id)
        return record

    async def delete(self, record_id: int) -> bool:
        record = await self.get(record_id)
        if record is None:
            return False
        await self.db.delete(record)
        await self.db.flush()
        return True

    async def _add(self, record: Any) -> Any:
        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)
        return record


class ClientService(_RecordService):
    model = Client

    async def list(self) -> builtins.list[Client]:
        result = await self.db.execute(select(Client).order_by(Client.name, Client.id))
        return list(result.scalars().all())

    async def create(self, data: ClientForm) -> Client:
        return await self._add(Client(**data.model_dump()))

    async def update(self, client_id: int, data: ClientForm) -> Client:
        client = await self.require(client_id)
        for field, value in data.model_dump().items():
            setattr(client, field, value)
        await self.db.flush()
        return client


class BoatService(_RecordService):
    model = Boat

    async def list(self) -> builtins.list[Boat]:
        result = await self.db.execute(select(Boat).order_by(Boat.name, Boat.id))
        return list(result.scalars().all())

    async def create(self, data: BoatForm) -> Boat:
        return await self._add(Boat(**data.model_dump()))

    async def toggle_availability(self, boat_id: int) -> Boat:
        boat = await self.require(boat_id)
        boat.available = not boat.available
        await self.db.flush()
        return boat


class ReservationService(_RecordService):
    model = Reservation

    async def list(self) -> builtins.list[Reservation]:
        """List reservations, latest start date first, with client and boat loaded."""
        result = await self.db.execute(
            select(Reservation)
            .options(selectinload(Reservation.client), selectinload(Reservation.boat))
            .order_by(Reservation.start_date.desc(), Reservation.id.desc())
        )
        return list(result.scalars().all())

    async def create(self, data: ReservationForm) -> Reservation:
        await ClientService(self.db).require(data.client_id)
        await BoatService(self.db).require(data.boat_id)
        return await self._add(Reservation(**data.model_dump()))


class InvoiceService(_RecordService):
    model = Invoice

    async def list(self) -> builtins.list[Invoice]:
        result = await self.db.execute(
            select(Invoice).order_by(Invoice.date.desc(), Invoice.id.desc())
        )
        return list(result.scalars().all())

    async def create(self, data: InvoiceForm) -> Invoice:
        await ReservationService(self.db).require(data.reservation_id)
        return await self._add(Invoice(reservation_id=data.reservation_id, amount=data.amount))

    async def mark_paid(self, invoice_id: int) -> Invoice:
        invoice = await self.require(invoice_id)
        invoice.paid = True
        await self.db.flush()
        return invoice


class CashService(_RecordService):
    model = CashTransaction

    async def list(self) -> builtins.list[CashTransaction]:
        result = await self.db.execute(
            select(CashTransaction).order_by(CashTransaction.date.desc(), CashTransaction.id.desc())
        )
        return list(result.scalars().all())

    async def create(self, data: CashTransactionForm) -> CashTransaction:
        await InvoiceService(self.db).require(data.invoice_id)
        return await self._add(CashTransaction(**data.model_dump()))


class MaintenanceService(_RecordService):
    model = Maintenance

    async def list(self) -> builtins.list[Maintenance]:
        result = await self.db.execute(
            select(Maintenance)
            .options(selectinload(Maintenance.boat))
            .order_by(Maintenance.date.desc(), Maintenance.id.desc())
        )
        return list(result.scalars().all())

    async def create(self, data: MaintenanceForm) -> Maintenance:
        await BoatService(self.db).require(data.boat_id)
        return await self._add(Maintenance(**data.model_dump()))

    async def complete(self, maintenance_id: int) -> Maintenance:
        record = await self.require(maintenance_id)
        record.completed = True
        await self.db.flush()
        return record
