# Boat Rental Pydantic Schemas
from boatrental.schemas.auth import (
    ErrorResponse,
    LoginRequest,
    SessionResponse,
    TokenResponse,
)
from boatrental.schemas.rental import (
    BoatForm,
    BoatOccupancy,
    CashTransactionForm,
    ClientForm,
    DashboardStats,
    InvoiceForm,
    MaintenanceForm,
    MonthlyIncome,
    ReservationForm,
)

__all__ = [
    "BoatForm",
    "BoatOccupancy",
    "CashTransactionForm",
    "ClientForm",
    "DashboardStats",
    "ErrorResponse",
    "InvoiceForm",
    "LoginRequest",
    "MaintenanceForm",
    "MonthlyIncome",
    "ReservationForm",
    "SessionResponse",
    "TokenResponse",
]
