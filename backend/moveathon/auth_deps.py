from __future__ import annotations
import hmac
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from moveathon.config import settings

security = HTTPBearer()

async def require_admin(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    if not settings.admin_token:
        raise HTTPException(status_code=503, detail="Admin access not configured")
    if not hmac.compare_digest(credentials.credentials.encode(), settings.admin_token.encode()):
        raise HTTPException(status_code=401, detail="Invalid token")
    return "admin"
