# app/auth/dependencies.py
import hmac
import logging
from fastapi import Depends, Header, Query, Request
from typing import Optional
from app.config import Settings
from app.errors import Unauthorized
from app.subscribers import SubscriberStore

logger = logging.getLogger(__name__)

def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with"""
    return request.app.state.settings

def get_store(request: Request) -> SubscriberStore:
    """Subscriber store opened by the application lifespan"""
    return request.app.state.store

async def require_admin_token(
    settings: Settings = Depends(get_app_settings),
    x_admin_token: Optional[str] = Header(None),
    token: Optional[str] = Query(None)
) -> None:
    """Check the shared admin secret from header or query - no gate when unset"""
    if not settings.admin_token:
        return

    supplied = x_admin_token or token
    if not supplied or not hmac.compare_digest(supplied.encode(), settings.admin_token.encode()):
        logger.warning("Rejected admin request with missing or invalid token")
        raise Unauthorized()
