from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import IndexModel, ASCENDING, DESCENDING
from .core.config import settings

# tz_aware=True so all dates read back from MongoDB are timezone-aware (UTC).
client = AsyncIOMotorClient(
    settings.DATABASE_URL,
    tz_aware=True,
    serverSelectionTimeoutMS=settings.DB_SERVER_SELECTION_TIMEOUT_MS,
)

db: AsyncIOMotorDatabase = client[settings.DATABASE_NAME]

REGISTRATION_INDEXES = [
    IndexModel([("nim", ASCENDING)], unique=True, name="nim_unique"),
    IndexModel([("binusianEmail", ASCENDING)], unique=True, name="binusian_email_unique"),
    IndexModel([("registrationDate", DESCENDING)], name="registration_date_desc"),
]

SETTINGS_INDEXES = [
    IndexModel([("name", ASCENDING)], unique=True, name="settings_name_unique"),
]

async def get_db() -> AsyncIOMotorDatabase:
    return db

async def ping(database: AsyncIOMotorDatabase) -> None:
    """Raises a PyMongoError if the server cannot be reached."""
    await database.command("ping")

async def ensure_indexes(database: AsyncIOMotorDatabase) -> None:
    """
    Creates the indexes the service relies on. The unique indexes are the
    only guard against two registrations sharing a NIM or Binusian email.
    """
    await database.registrations.create_indexes(REGISTRATION_INDEXES)
    await database.settings.create_indexes(SETTINGS_INDEXES)
