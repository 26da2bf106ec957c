# app/api/v1/endpoints/charges.py
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.rate_limit import limiter
from app.core.security import get_api_key
from app.domain.services.charge_orchestrator import ChargeOrchestrator
from app.domain.services.charge_store import ChargeStore
from app.infra.db.session import get_db
from app.schemas.charge_schemas import ChargeCreate, ChargeRead
from app.schemas.common import ERROR_RESPONSES, ErrorResponse, parse_uuid

router = APIRouter(prefix="/charges", tags=["charges"], dependencies=[Depends(get_api_key)])


def get_orchestrator(request: Request) -> ChargeOrchestrator:
    return request.app.state.orchestrator


@router.post(
    "",
    response_model=ChargeRead,
    status_code=201,
    responses={**ERROR_RESPONSES, 422: {"model": ErrorResponse}},
)
@limiter.limit(settings.RATE_LIMIT)
async def crear_cargo(
    request: Request,
    payload: ChargeCreate,
    orchestrator: ChargeOrchestrator = Depends(get_orchestrator),
):
    charge = await orchestrator.create_charge(payload)
    return ChargeRead.from_charge(charge)


@router.get("", response_model=List[ChargeRead], responses=ERROR_RESPONSES)
async def listar_cargos(
    card_id: str = Query(..., alias="cardId"),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    charges = await ChargeStore(db).list_for_card(parse_uuid(card_id, "card ID"), limit=limit)
    return [ChargeRead.from_charge(c) for c in charges]


@router.get("/{charge_id}", response_model=ChargeRead, responses=ERROR_RESPONSES)
async def obtener_cargo(charge_id: str, db: AsyncSession = Depends(get_db)):
    charge = await ChargeStore(db).get(parse_uuid(charge_id, "charge ID"))
    return ChargeRead.from_charge(charge)
