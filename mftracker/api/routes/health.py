from fastapi import APIRouter

from mftracker.config import settings

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok", "service": settings.APP_NAME, "env": settings.APP_ENV}
