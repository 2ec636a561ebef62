# app/services/registration_service.py

import logging
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..core.errors import (
    AppError,
    DuplicateRegistration,
    InvalidField,
    MissingField,
    NotFound,
    RegistrationClosed,
    StoreUnavailable,
)
from ..models.registration import (
    RegistrationCreate,
    RegistrationOut,
    RegistrationReceipt,
    RegistrationUpdate,
)
from .settings_service import get_status

logger = logging.getLogger("api_logger")

# Order matters: a candidate colliding on both is reported as a NIM conflict.
UNIQUE_FIELDS = ("nim", "binusianEmail")

MISSING_ERROR_TYPES = {"missing", "string_too_short"}

def _translate_validation_error(error: ValidationError) -> AppError:
    problems = error.errors()
    if any(p["type"] in MISSING_ERROR_TYPES or p.get("input") is None for p in problems):
        return MissingField()
    details = "; ".join(
        f"{'.'.join(str(part) for part in p['loc'])}: {p['msg']}" for p in problems
    )
    return InvalidField(details=details)

def _parse_object_id(registration_id: str) -> ObjectId:
    if not ObjectId.is_valid(registration_id):
        raise NotFound()
    return ObjectId(registration_id)

async def _find_conflicting_field(
    db: AsyncIOMotorDatabase,
    fields: dict,
    exclude_id: Optional[ObjectId] = None
) -> Optional[str]:
    """
    Works out which unique field a rejected write collided on. The unique
    index has already refused the write; this only names the culprit.
    """
    for field in UNIQUE_FIELDS:
        if field not in fields:
            continue
        query = {field: fields[field]}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        try:
            existing = await db.registrations.find_one(query, {"_id": 1})
        except PyMongoError as e:
            logger.error(f"Failed to resolve registration conflict: {e}")
            raise StoreUnavailable()
        if existing:
            return field
    return None

async def submit_registration(db: AsyncIOMotorDatabase, payload: dict) -> RegistrationReceipt:
    """
    Admits a new registration.

    The gate is consulted before the candidate is validated, so a closed
    gate always answers RegistrationClosed. Uniqueness of NIM and Binusian
    email is left to the unique indexes: the insert either succeeds or fails
    with a duplicate key error, leaving nothing behind.
    """
    if not await get_status(db):
        logger.info("Registration rejected: registration is closed.")
        raise RegistrationClosed()

    try:
        candidate = RegistrationCreate.model_validate(payload)
    except ValidationError as e:
        raise _translate_validation_error(e)

    registration_doc = candidate.model_dump(by_alias=True)
    registration_doc["registrationDate"] = datetime.now(timezone.utc)

    try:
        result = await db.registrations.insert_one(registration_doc)
    except DuplicateKeyError:
        field = await _find_conflicting_field(db, registration_doc)
        logger.info(f"Registration rejected: duplicate {field or 'key'} for nim={candidate.nim}")
        raise DuplicateRegistration(field)
    except PyMongoError as e:
        logger.error(f"Registration insert failed: {e}")
        raise StoreUnavailable()

    logger.info(f"Registration accepted: id={result.inserted_id} nim={candidate.nim}")
    return RegistrationReceipt(id=str(result.inserted_id), full_name=candidate.full_name)

async def list_registrations(db: AsyncIOMotorDatabase) -> List[RegistrationOut]:
    """All registrations, newest first."""
    try:
        cursor = db.registrations.find({}, sort=[("registrationDate", DESCENDING)])
        registrations = await cursor.to_list(length=None)
    except PyMongoError as e:
        logger.error(f"Failed to list registrations: {e}")
        raise StoreUnavailable()
    return [RegistrationOut.from_document(doc) for doc in registrations]

async def update_registration(
    db: AsyncIOMotorDatabase,
    registration_id: str,
    payload: dict
) -> RegistrationOut:
    """
    Partial admin edit. An unknown id answers NotFound before the payload is
    looked at; a vanished record between the two steps is still NotFound.
    """
    object_id = _parse_object_id(registration_id)

    try:
        existing = await db.registrations.find_one({"_id": object_id}, {"_id": 1})
    except PyMongoError as e:
        logger.error(f"Failed to load registration {registration_id}: {e}")
        raise StoreUnavailable()
    if existing is None:
        raise NotFound()

    try:
        update = RegistrationUpdate.model_validate(payload)
    except ValidationError as e:
        raise _translate_validation_error(e)

    update_data = update.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    if not update_data:
        raise MissingField("No update data provided.")

    try:
        updated_doc = await db.registrations.find_one_and_update(
            {"_id": object_id},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        field = await _find_conflicting_field(db, update_data, exclude_id=object_id)
        raise DuplicateRegistration(field)
    except PyMongoError as e:
        logger.error(f"Failed to update registration {registration_id}: {e}")
        raise StoreUnavailable()

    if updated_doc is None:
        raise NotFound()

    logger.info(f"Registration {registration_id} updated: fields={sorted(update_data)}")
    return RegistrationOut.from_document(updated_doc)

async def delete_registration(db: AsyncIOMotorDatabase, registration_id: str) -> None:
    object_id = _parse_object_id(registration_id)
    try:
        result = await db.registrations.delete_one({"_id": object_id})
    except PyMongoError as e:
        logger.error(f"Failed to delete registration {registration_id}: {e}")
        raise StoreUnavailable()
    if result.deleted_count == 0:
        raise NotFound()
    logger.info(f"Registration {registration_id} deleted.")
