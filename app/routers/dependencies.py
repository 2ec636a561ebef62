# app/routers/dependencies.py

from fastapi import Depends

from ..core.security import oauth2_scheme, decode_admin_token

async def get_current_admin(token: str = Depends(oauth2_scheme)) -> str:
    """
    Gate for every admin endpoint. A missing header is rejected by
    oauth2_scheme itself; a bad or expired token raises Unauthorized.
    Returns the admin email carried by the token.
    """
    return decode_admin_token(token)
