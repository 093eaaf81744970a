from fastapi import APIRouter
from app.modules.consent.router import router as consent_router
from app.modules.accounts.router import router as accounts_router

api_router = APIRouter()
api_router.include_router(consent_router, prefix="/consent", tags=["consent"])
api_router.include_router(accounts_router, prefix="/accounts", tags=["accounts"])

@api_router.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
