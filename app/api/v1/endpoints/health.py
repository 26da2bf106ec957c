# app/api/v1/endpoints/health.py
import logging
from datetime import datetime

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.schemas.health_schemas import ComponentStatus, HealthResponse, PageInfo, StatusObject

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    t = datetime.utcnow().isoformat() + "Z"
    app_settings = request.app.state.settings

    # DB
    try:
        await request.app.state.db.ping()
        db_status = ComponentStatus(status="operational", detail="Database connection OK")
    except Exception as e:
        logger.error(f"❌ Health check DB fallido: {e}")
        db_status = ComponentStatus(status="major_outage", detail=f"Database error: {e}")

    if db_status.status == "operational":
        indicator, desc, code = "operational", "All systems functional.", 200
    else:
        indicator, desc, code = "major_outage", "Database unavailable.", 500

    body = HealthResponse(
        page=PageInfo(
            name=request.app.title,
            version=app_settings.PROJECT_VERSION,
            time=t,
        ),
        status=StatusObject(indicator=indicator, description=desc),
        components={"database": db_status},
    )
    return JSONResponse(status_code=code, content=body.model_dump(mode="json"))
