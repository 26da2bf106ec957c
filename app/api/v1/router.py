# app/api/v1/router.py
from fastapi import APIRouter

from app.api.v1.endpoints.cards import router as cards_router
from app.api.v1.endpoints.charges import router as charges_router
from app.api.v1.endpoints.health import router as health_router


def build_card_router() -> APIRouter:
    api_router_v1 = APIRouter(prefix="/api/v1")
    api_router_v1.include_router(health_router)
    api_router_v1.include_router(cards_router)
    return api_router_v1


def build_charge_router() -> APIRouter:
    api_router_v1 = APIRouter(prefix="/api/v1")
    api_router_v1.include_router(health_router)
    api_router_v1.include_router(charges_router)
    return api_router_v1
