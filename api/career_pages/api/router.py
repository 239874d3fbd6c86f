from fastapi import APIRouter

from career_pages.api.routes import editor, health, pages, public

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(editor.router, prefix="/pages", tags=["editor"])
api_router.include_router(pages.router, prefix="/pages", tags=["owner"])
api_router.include_router(public.router, tags=["public"])
