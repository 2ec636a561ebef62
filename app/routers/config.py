# app/routers/config.py

from fastapi import APIRouter, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from ..db import get_db
from ..models.admin import GateStatus
from ..services.settings_service import get_status
from ..core.rate_limiter import limiter_decorator

router = APIRouter(prefix="/api/settings", tags=["Settings"])

@router.get("/status", response_model=GateStatus)
@limiter_decorator("60/minute") # Protect this public endpoint
async def get_registration_status(request: Request, db: AsyncIOMotorDatabase = Depends(get_db)):
    return GateStatus(is_registration_open=await get_status(db))
