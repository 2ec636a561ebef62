# app/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Optional
from passlib.context import CryptContext
from jose import JWTError, jwt
from fastapi.security import OAuth2PasswordBearer
from .config import settings
from .errors import Unauthorized

ADMIN_ROLE = "admin"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/admin/login")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None
) -> str:
    to_encode = data.copy()

    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "iat": now
    })

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def authenticate_admin(email: str, password: str) -> str:
    """
    Checks the credentials against the configured admin mapping and returns
    a signed, expiring access token. Every admin shares the same role; the
    token only records which email logged in.
    """
    normalized_email = email.strip().lower()
    hashed_password = settings.admin_credentials.get(normalized_email)
    if hashed_password is None or not verify_password(password, hashed_password):
        raise Unauthorized("Invalid email or password.")
    return create_access_token(data={"sub": normalized_email, "role": ADMIN_ROLE})

def decode_admin_token(token: str) -> str:
    """Returns the admin email carried by a valid token, else raises Unauthorized."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise Unauthorized()

    email = payload.get("sub")
    if email is None or payload.get("iat") is None or payload.get("role") != ADMIN_ROLE:
        raise Unauthorized()
    # Tokens of admins removed from the configuration stop working immediately.
    if email not in settings.admin_credentials:
        raise Unauthorized()
    return email
