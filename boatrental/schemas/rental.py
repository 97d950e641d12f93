"""Pydantic schemas for the rental back-office forms.

HTML forms post every value as a string; these models do the required-field
checks and type coercion. Empty optional fields become None.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ClientForm(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    phone: str | None = Field(None, max_length=64)

    @field_validator("email", "phone", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class BoatForm(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=64)
    capacity: int = Field(..., gt=0)
    # Unchecked checkboxes are simply absent from the form
    available: bool = False


class ReservationForm(BaseModel):
    client_id: int = Field(..., gt=0)
    boat_id: int = Field(..., gt=0)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self) -> "ReservationForm":
        if self.end_date < self.start_date:
            raise ValueError("End date must not be before start date")
        return self


class InvoiceForm(BaseModel):
    reservation_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class CashTransactionForm(BaseModel):
    invoice_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    method: str = Field(..., min_length=1, max_length=64)


class MaintenanceForm(BaseModel):
    boat_id: int = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    completed: bool = False


class DashboardStats(BaseModel):
    """Headline figures shown on the dashboard."""

    total_reservations: int = 0
    paid_income: Decimal = Decimal("0")
    available_boats: int = 0


class MonthlyIncome(BaseModel):
    month: str
    total: Decimal


class BoatOccupancy(BaseModel):
    name: str
    reservations: int
