# Boat Rental Models
from boatrental.models.base import BaseModel
from boatrental.models.rental import (
    Boat,
    CashTransaction,
    Client,
    Invoice,
    Maintenance,
    Reservation,
)
from boatrental.models.token_blacklist import TokenBlacklist
from boatrental.models.user import User

__all__ = [
    "BaseModel",
    "Boat",
    "CashTransaction",
    "Client",
    "Invoice",
    "Maintenance",
    "Reservation",
    "TokenBlacklist",
    "User",
]
