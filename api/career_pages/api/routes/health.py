from fastapi import APIRouter, Depends

from career_pages.core.config import Settings, get_settings

router = APIRouter()


@router.get("/")
async def root(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    return {"status": "ok", "service": settings.app_name}


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(settings: Settings = Depends(get_settings)) -> dict[str, object]:
    checks = {
        "database": bool(settings.database_url),
        "auth": bool(settings.supabase_url and settings.supabase_anon_key),
        "storage": bool(settings.supabase_url and settings.supabase_service_key),
    }
    return {"status": "ok" if all(checks.values()) else "degraded", "checks": checks}
