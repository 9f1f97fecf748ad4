# app/routes/admin.py
from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse, Response
import logging
from app.auth.dependencies import get_app_settings, get_store, require_admin_token
from app.config import Settings
from app.errors import StoreUnavailable
from app.subscribers import SubscriberStore, to_csv

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])

@router.get("/export.csv", dependencies=[Depends(require_admin_token)])
async def export_subscribers(
    store: SubscriberStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings)
):
    """Download every subscriber as CSV, newest first"""
    try:
        records = await store.list_all()
    except StoreUnavailable as e:
        logger.error(f"CSV export failed: {e}")
        return PlainTextResponse(
            "Error exportando CSV",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.info(f"Exporting {len(records)} subscribers as CSV")
    return Response(
        content=to_csv(records, include_ip=settings.track_ip),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=subscribers.csv"}
    )
