from fastapi import APIRouter, Body, Depends, Request
from app.core.security import get_principal, Principal
from app.modules.consent.schemas import (
    ConsentCreate, ConsentUpdate, ConsentRevoke, ConsentSuspend,
    ConsentOut, ConsentDetailOut, ConsentHistoryOut, ConsentHistoryItem, ConsentStatsOut, ScopesOut,
)
from app.modules.consent.scopes import ConsentScope, describe_scopes
from app.modules.consent.service import ConsentService

router = APIRouter()

def svc(request: Request) -> ConsentService:
    return request.app.state.consent_service

# ---- Public ----

@router.get("/scopes", response_model=ScopesOut)
async def list_scopes():
    return ScopesOut(scopes=list(ConsentScope), descriptions=describe_scopes())

# ---- Consent management ----

@router.post("/create", response_model=ConsentOut, status_code=201)
async def create_consent(
    payload: ConsentCreate,
    principal: Principal = Depends(get_principal),
    service: ConsentService = Depends(svc),
):
    obj = await service.create(
        principal.user_id,
        scopes=payload.scopes,
        duration_days=payload.duration,
        accept_terms=payload.accept_terms,
        app=payload.third_party_app,
        metadata=payload.metadata,
    )
    return ConsentOut.of(obj)

@router.get("/history", response_model=ConsentHistoryOut)
async def consent_history(
    principal: Principal = Depends(get_principal),
    service: ConsentService = Depends(svc),
):
    entries = await service.history(principal.user_id)
    return ConsentHistoryOut(consents=[ConsentHistoryItem.of(e) for e in entries])

@router.get("/active", response_model=list[ConsentDetailOut])
async def active_consents(
    principal: Principal = Depends(get_principal),
    service: ConsentService = Depends(svc),
):
    return [ConsentDetailOut.of(c) for c in await service.active_consents(principal.user_id)]

@router.get("/stats", response_model=ConsentStatsOut)
async def consent_stats(
    principal: Principal = Depends(get_principal),
    service: ConsentService = Depends(svc),
):
    return ConsentStatsOut(stats=await service.stats(principal.user_id))

@router.get("/{consent_id}", response_model=ConsentDetailOut)
async def get_consent(
    consent_id: str,
    principal: Principal = Depends(get_principal),
    service: ConsentService = Depends(svc),
):
    return ConsentDetailOut.of(await service.get(principal.user_id, consent_id))

@router.put("/{consent_id}", response_model=ConsentOut)
async def update_consent(
    consent_id: str,
    payload: ConsentUpdate,
    principal: Principal = Depends(get_principal),
    service: ConsentService = Depends(svc),
):
    obj = await service.update(principal.user_id, consent_id, payload.model_dump(exclude_unset=True))
    return ConsentOut.of(obj)

@router.delete("/{consent_id}", response_model=ConsentOut)
async def revoke_consent(
    consent_id: str,
    payload: ConsentRevoke | None = Body(default=None),
    principal: Principal = Depends(get_principal),
    service: ConsentService = Depends(svc),
):
    obj = await service.revoke(principal.user_id, consent_id, payload.reason if payload else None)
    return ConsentOut.of(obj)

@router.post("/{consent_id}/suspend", response_model=ConsentOut)
async def suspend_consent(
    consent_id: str,
    payload: ConsentSuspend,
    principal: Principal = Depends(get_principal),
    service: ConsentService = Depends(svc),
):
    return ConsentOut.of(await service.suspend(principal.user_id, consent_id, payload.reason))

@router.post("/{consent_id}/reactivate", response_model=ConsentOut)
async def reactivate_consent(
    consent_id: str,
    principal: Principal = Depends(get_principal),
    service: ConsentService = Depends(svc),
):
    return ConsentOut.of(await service.reactivate(principal.user_id, consent_id))
