# app/api/v1/endpoints/cards.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.rate_limit import limiter
from app.core.security import get_api_key
from app.domain.services.card_service import (
    create_card, get_card, parse_card_id, update_card_status
)
from app.infra.db.session import get_db
from app.schemas.card_schemas import CardCreate, CardCreated, CardRead, CardStatusUpdate
from app.schemas.common import ERROR_RESPONSES, ErrorResponse

router = APIRouter(prefix="/cards", tags=["cards"], dependencies=[Depends(get_api_key)])


@router.post("", response_model=CardCreated, status_code=201, responses=ERROR_RESPONSES)
@limiter.limit(settings.RATE_LIMIT)
async def crear_tarjeta(
    request: Request,
    payload: CardCreate,
    db: AsyncSession = Depends(get_db),
):
    card = await create_card(db, payload.amount, payload.currency, payload.metadata)
    return CardCreated.from_card(card, cvv=card.cvv)


@router.get("/{card_id}", response_model=CardRead, responses=ERROR_RESPONSES)
async def obtener_tarjeta(card_id: str, db: AsyncSession = Depends(get_db)):
    card = await get_card(db, parse_card_id(card_id))
    return CardRead.from_card(card)


@router.put(
    "/{card_id}/status",
    response_model=CardRead,
    responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse}},
)
async def actualizar_estado(
    card_id: str,
    payload: CardStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Uso interno: lo invoca el orquestador de cargos."""
    card = await update_card_status(
        db,
        parse_card_id(card_id),
        payload.status,
        expected_status=payload.expected_status,
    )
    return CardRead.from_card(card)
