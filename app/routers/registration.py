# app/routers/registration.py

from fastapi import APIRouter, Body, Depends, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Any, Dict

from ..db import get_db
from ..models.registration import RegistrationCreated
from ..services.registration_service import submit_registration
from ..core.rate_limiter import limiter_decorator

router = APIRouter(prefix="/api", tags=["Registration"])

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegistrationCreated)
@limiter_decorator("5/minute")
async def register(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    # The body is taken raw: the gate must be checked before field validation.
    receipt = await submit_registration(db, payload)
    return RegistrationCreated(message="Registration successful!", data=receipt)
