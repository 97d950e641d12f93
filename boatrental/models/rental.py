"""Rental business models: clients, boats, reservations, invoices, payments, maintenance."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from boatrental.models.base import BaseModel


class Client(BaseModel):
    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)

    reservations: Mapped[list["Reservation"]] = relationship(
        back_populates="client", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Client {self.name}>"


class Boat(BaseModel):
    """A boat or jetski in the rental fleet."""

    __tablename__ = "boats"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    reservations: Mapped[list["Reservation"]] = relationship(
        back_populates="boat", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Boat {self.name}>"


class Reservation(BaseModel):
    __tablename__ = "reservations"

    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    boat_id: Mapped[int] = mapped_column(
        ForeignKey("boats.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    client: Mapped[Client] = relationship(back_populates="reservations")
    boat: Mapped[Boat] = relationship(back_populates="reservations")


class Invoice(BaseModel):
    __tablename__ = "invoices"

    reservation_id: Mapped[int] = mapped_column(
        ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )


class CashTransaction(BaseModel):
    """A payment received against an invoice."""

    __tablename__ = "cash_transactions"

    invoice_id: Mapped[int] = mapped_column(
        ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    method: Mapped[str] = mapped_column(String(64), nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )


class Maintenance(BaseModel):
    __tablename__ = "maintenances"

    boat_id: Mapped[int] = mapped_column(
        ForeignKey("boats.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    boat: Mapped[Boat] = relationship()
