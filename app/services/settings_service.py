# app/services/settings_service.py

import logging
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from ..core.errors import StoreUnavailable

logger = logging.getLogger("api_logger")

SETTINGS_NAME = "mainSettings"
DEFAULT_REGISTRATION_OPEN = True

async def _load_settings(db: AsyncIOMotorDatabase) -> dict:
    # Upsert-on-read: the first access creates the singleton with the default.
    return await db.settings.find_one_and_update(
        {"name": SETTINGS_NAME},
        {"$setOnInsert": {"isRegistrationOpen": DEFAULT_REGISTRATION_OPEN}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )

async def get_status(db: AsyncIOMotorDatabase) -> bool:
    try:
        settings_doc = await _load_settings(db)
    except PyMongoError as e:
        logger.error(f"Failed to read registration settings: {e}")
        raise StoreUnavailable()
    return bool(settings_doc.get("isRegistrationOpen", DEFAULT_REGISTRATION_OPEN))

async def toggle_status(db: AsyncIOMotorDatabase) -> bool:
    """
    Flips the registration gate and returns the new value.
    Concurrent toggles are not serialized; the last write wins.
    """
    new_value = not await get_status(db)
    try:
        await db.settings.update_one(
            {"name": SETTINGS_NAME},
            {"$set": {"isRegistrationOpen": new_value}}
        )
    except PyMongoError as e:
        logger.error(f"Failed to toggle registration settings: {e}")
        raise StoreUnavailable()
    logger.info(f"Registration is now {'OPEN' if new_value else 'CLOSED'}.")
    return new_value
