from fastapi import APIRouter

from monitor_leads.core.config import settings

router = APIRouter()

@router.get("/health")
def health():
    return {
        "ok": True,
        "imoviewKeyConfigured": bool(settings.IMOVIEW_API_KEY),
    }
