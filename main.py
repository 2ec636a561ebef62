# main.py

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from pymongo.errors import OperationFailure, PyMongoError
from contextlib import asynccontextmanager
import logging
from logging.handlers import RotatingFileHandler
import time
from jose import jwt, JWTError

# --- Core Application Imports ---
from app.db import db, ensure_indexes, ping
from app.routers import admin, config, registration
from app.core.config import settings
from app.core.errors import AppError, Unauthorized

# --- Rate Limiting Imports (Conditional) ---
from app.core.rate_limiter import limiter, limiter_decorator
if limiter:
    from slowapi.errors import RateLimitExceeded

# --- Logging Setup ---
logger = logging.getLogger("api_logger")
logger.setLevel(logging.INFO)
handler = RotatingFileHandler(settings.LOG_FILE, maxBytes=5*1024*1024, backupCount=5)
formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown logic.
    The service cannot run without its database, so a failed ping aborts startup.
    """
    logger.info("Application startup: checking database connectivity...")
    try:
        await ping(db)
    except PyMongoError as e:
        logger.critical(f"Cannot reach the database at startup: {e}")
        raise

    logger.info("Database reachable; creating indexes...")
    try:
        await ensure_indexes(db)
        logger.info("Database indexes created successfully.")
    except OperationFailure as e:
        logger.error(f"An error occurred during index creation: {e}")
    yield
    logger.info("Application shutdown.")


app = FastAPI(
    title="Event Registration API",
    description="Backend API for the event registration site and its admin dashboard.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Rate Limiting Setup (Conditional) ---
if settings.RATE_LIMITING_ENABLED and limiter:
    logger.info(f"Rate limiting is ENABLED. Storage: {settings.REDIS_URL}")
    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded for IP {request.client.host} on path {request.url.path}")
        return JSONResponse(
            status_code=429,
            content={"message": f"Rate limit exceeded: {exc.detail}"},
        )
else:
    logger.info("Rate limiting is DISABLED.")

# --- Error Translation ---
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_content(), headers=headers)

@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    # Reached only when the body is absent or not a JSON object.
    return JSONResponse(
        status_code=400,
        content={"message": "Please fill all required fields.", "details": str(exc.errors())},
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

# --- Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    admin_email = "anonymous"
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ")[1]
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            admin_email = payload.get("sub", "unknown")
        except JWTError:
            admin_email = "invalid_token"

    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000
    ip_address = request.client.host if request.client else "unknown"

    log_message = (
        f'user="{admin_email}" '
        f'ip="{ip_address}" '
        f'method="{request.method}" '
        f'path="{request.url.path}" '
        f'status={response.status_code} '
        f'duration={process_time:.2f}ms'
    )
    logger.info(log_message)
    return response

# --- CORS Middleware Configuration ---
logger.info(f"CORS origins configured for: {settings.CORS_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# --- API Routers ---
app.include_router(registration.router)
app.include_router(config.router)
app.include_router(admin.router)

# --- Root Endpoint ---
@app.get("/")
@limiter_decorator("100/minute")
def read_root(request: Request):
    """
    Root endpoint for health checks and welcome message.
    """
    return {"message": "Event Registration API is running!"}
