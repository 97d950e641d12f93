"""Boat Rental Router - aggregates routes behind their session guards."""

from fastapi import APIRouter, Depends

from boatrental.api import (
    auth,
    boats,
    clients,
    dashboard,
    invoices,
    maintenance,
    reports,
    reservations,
)
from boatrental.api.deps import api_guard, page_guard

# Browser pages and form posts; a missing or bad session redirects to /login
pages_router = APIRouter(dependencies=[Depends(page_guard)])

pages_router.include_router(dashboard.router)
pages_router.include_router(clients.router)
pages_router.include_router(boats.router)
pages_router.include_router(reservations.router)
pages_router.include_router(invoices.router)
pages_router.include_router(maintenance.router)
pages_router.include_router(reports.router)

# JSON endpoints; a missing or bad session answers 401
api_router = APIRouter(dependencies=[Depends(api_guard)])

api_router.include_router(auth.session_router)
api_router.include_router(dashboard.stats_router)

# Login form, login and logout stay reachable without a session
public_router = APIRouter()

public_router.include_router(auth.router)
