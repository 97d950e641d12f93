"""Invoice and cash register pages."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.api.deps import FormError, parse_form, redirect, render
from boatrental.core import get_db
from boatrental.schemas.rental import CashTransactionForm, InvoiceForm
from boatrental.services.rental import CashService, InvoiceService, RecordNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["invoices"])


async def _render_invoices(
    request: Request,
    db: AsyncSession,
    error: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    invoices = await InvoiceService(db).list()
    return render(request, "invoices.html", {"invoices": invoices, "error": error}, status_code)


async def _render_cash(
    request: Request,
    db: AsyncSession,
    error: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    transactions = await CashService(db).list()
    return render(request, "cash.html", {"transactions": transactions, "error": error}, status_code)


@router.get("/invoices", include_in_schema=False)
async def list_invoices(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    return await _render_invoices(request, db)


@router.post("/api/invoices", include_in_schema=False)
async def create_invoice(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    try:
        data = await parse_form(request, InvoiceForm)
        invoice = await InvoiceService(db).create(data)
    except FormError as e:
        return await _render_invoices(request, db, e.message, status.HTTP_400_BAD_REQUEST)
    except RecordNotFoundError as e:
        return await _render_invoices(request, db, str(e), status.HTTP_400_BAD_REQUEST)

    await db.commit()
    logger.info(f"Created invoice {invoice.id}")
    return redirect("/invoices")


@router.post("/api/invoices/{invoice_id}/pay", include_in_schema=False)
async def mark_invoice_paid(
    request: Request, invoice_id: int, db: AsyncSession = Depends(get_db)
) -> Response:
    try:
        await InvoiceService(db).mark_paid(invoice_id)
    except RecordNotFoundError as e:
        return await _render_invoices(request, db, str(e), status.HTTP_404_NOT_FOUND)
    await db.commit()
    return redirect("/invoices")


@router.get("/cash", include_in_schema=False)
async def list_cash_transactions(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    return await _render_cash(request, db)


@router.post("/api/cash", include_in_schema=False)
async def create_cash_transaction(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    try:
        data = await parse_form(request, CashTransactionForm)
        transaction = await CashService(db).create(data)
    except FormError as e:
        return await _render_cash(request, db, e.message, status.HTTP_400_BAD_REQUEST)
    except RecordNotFoundError as e:
        return await _render_cash(request, db, str(e), status.HTTP_400_BAD_REQUEST)

    await db.commit()
    logger.info(f"Recorded cash transaction {transaction.id}")
    return redirect("/cash")
