# app/routes/notify.py
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
import logging
from app.auth.dependencies import get_app_settings, get_store
from app.config import Settings
from app.models.subscriber import NotifyResponse, parse_notify_request
from app.subscribers import SubscriberStore
from app.utils.validation import normalize_client_ip

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["notify"])

@router.post("/notify", status_code=status.HTTP_201_CREATED, response_model=NotifyResponse)
async def notify(
    req: Request,
    store: SubscriberStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings)
):
    """Subscribe an email address, once per canonical email"""
    try:
        body = await req.json()
    except ValueError:
        body = None

    client_host = req.client.host if req.client else None
    logger.info(f"Notify request received: {body} from IP: {client_host}")

    subscription = parse_notify_request(body)
    ip = normalize_client_ip(client_host) if settings.track_ip else None

    outcome = await store.try_insert(subscription.email, ip)

    if outcome.inserted:
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content=NotifyResponse(message="Suscripción creada").model_dump()
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=NotifyResponse(message="Ya estabas suscrito").model_dump()
    )
