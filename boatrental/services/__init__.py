# Boat Rental Services
from boatrental.services.auth import AuthService
from boatrental.services.rental import (
    BoatService,
    CashService,
    ClientService,
    InvoiceService,
    MaintenanceService,
    RecordNotFoundError,
    ReservationService,
)
from boatrental.services.reports import ReportService

__all__ = [
    "AuthService",
    "BoatService",
    "CashService",
    "ClientService",
    "InvoiceService",
    "MaintenanceService",
    "RecordNotFoundError",
    "ReportService",
    "ReservationService",
]
