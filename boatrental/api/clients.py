"""Client management pages."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.api.deps import FormError, parse_form, redirect, render
from boatrental.core import get_db
from boatrental.schemas.rental import ClientForm
from boatrental.services.rental import ClientService, RecordNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["clients"])


async def _render_clients(
    request: Request,
    db: AsyncSession,
    error: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> Response:
    clients = await ClientService(db).list()
    return render(request, "clients.html", {"clients": clients, "error": error}, status_code)


@router.get("/clients", include_in_schema=False)
async def list_clients(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    return await _render_clients(request, db)


@router.post("/api/clients", include_in_schema=False)
async def create_client(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    try:
        data = await parse_form(request, ClientForm)
    except FormError as e:
        return await _render_clients(request, db, e.message, status.HTTP_400_BAD_REQUEST)

    client = await ClientService(db).create(data)
    await db.commit()
    logger.info(f"Created client {client.id}")
    return redirect("/clients")


@router.get("/clients/edit/{client_id}", include_in_schema=False)
async def edit_client_page(
    request: Request, client_id: int, db: AsyncSession = Depends(get_db)
) -> Response:
    client = await ClientService(db).get(client_id)
    if client is None:
        return render(
            request,
            "not_found.html",
            {"message": f"Client {client_id} not found"},
            status.HTTP_404_NOT_FOUND,
        )
    return render(request, "client_edit.html", {"client": client, "error": None})


@router.post("/api/clients/{client_id}", include_in_schema=False)
async def update_client(
    request: Request, client_id: int, db: AsyncSession = Depends(get_db)
) -> Response:
    service = ClientService(db)
    try:
        data = await parse_form(request, ClientForm)
        await service.update(client_id, data)
    except FormError as e:
        client = await service.get(client_id)
        if client is None:
            return render(
                request,
                "not_found.html",
                {"message": f"Client {client_id} not found"},
                status.HTTP_404_NOT_FOUND,
            )
        return render(
            request,
            "client_edit.html",
            {"client": client, "error": e.message},
            status.HTTP_400_BAD_REQUEST,
        )
    except RecordNotFoundError as e:
        return render(request, "not_found.html", {"message": str(e)}, status.HTTP_404_NOT_FOUND)

    await db.commit()
    return redirect("/clients")


@router.post("/api/clients/{client_id}/delete", include_in_schema=False)
async def delete_client(client_id: int, db: AsyncSession = Depends(get_db)) -> Response:
    if await ClientService(db).delete(client_id):
        await db.commit()
        logger.info(f"Deleted client {client_id}")
    return redirect("/clients")
