# app/routers/admin.py

import logging
from fastapi import APIRouter, Body, Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Any, Dict, List

from ..db import get_db
from ..core.errors import MissingField
from ..core.rate_limiter import limiter_decorator
from ..core.security import authenticate_admin
from ..models.admin import AdminLogin, GateStatus, Message, Token
from ..models.registration import RegistrationOut, RegistrationUpdated
from ..services import registration_service, settings_service
from .dependencies import get_current_admin

logger = logging.getLogger("api_logger")

router = APIRouter(prefix="/api/admin", tags=["Administration"])

@router.post("/login", response_model=Token)
@limiter_decorator("10/minute")
async def login(request: Request, credentials: AdminLogin):
    if not credentials.email.strip() or not credentials.password:
        raise MissingField("Email and password are required.")

    token = authenticate_admin(credentials.email, credentials.password)
    logger.info(f"Admin login: {credentials.email.strip().lower()}")
    return Token(message="Login successful!", token=token)

@router.get("/registrations", response_model=List[RegistrationOut])
async def read_all_registrations(
    admin_email: str = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Get every registration, newest first. Requires admin privileges.
    """
    return await registration_service.list_registrations(db)

@router.put("/registrations/{registration_id}", response_model=RegistrationUpdated)
async def update_registration(
    registration_id: str,
    payload: Dict[str, Any] = Body(...),
    admin_email: str = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    updated = await registration_service.update_registration(db, registration_id, payload)
    return RegistrationUpdated(message="Registration updated successfully.", data=updated)

@router.delete("/registrations/{registration_id}", response_model=Message)
async def delete_registration(
    registration_id: str,
    admin_email: str = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await registration_service.delete_registration(db, registration_id)
    return Message(message="Registration deleted successfully.")

@router.post("/settings/toggle", response_model=GateStatus)
async def toggle_registration_status(
    admin_email: str = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    is_open = await settings_service.toggle_status(db)
    logger.info(f"Registration gate toggled by {admin_email}")
    return GateStatus(is_registration_open=is_open)
