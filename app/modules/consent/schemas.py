from datetime import datetime
from typing import Any
from pydantic import BaseModel, Field
from app.core.logging import current_request_id
from app.modules.consent.models import Consent, ConsentHistoryEntry, ConsentStatus, ThirdPartyApp
from app.modules.consent.scopes import ConsentScope

class ConsentCreate(BaseModel):
    # Scope membership is checked by the scope registry so the error lists offenders
    scopes: list[str] = Field(..., examples=[["accounts", "balances", "transactions"]])
    # int or digit string, checked by parse_duration_days (bools included)
    duration: Any = Field(..., description="Consent duration in days", examples=["30"])
    accept_terms: bool
    third_party_app: ThirdPartyApp
    metadata: str | None = None

class ConsentUpdate(BaseModel):
    scopes: list[str] | None = None
    duration: Any = None
    metadata: str | None = None

class ConsentRevoke(BaseModel):
    reason: str | None = None

class ConsentSuspend(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)

class ConsentOut(BaseModel):
    success: bool = True
    consent_id: str
    scopes: list[ConsentScope]
    status: ConsentStatus
    created_at: datetime
    expires_at: datetime
    last_used: datetime | None
    third_party_app: ThirdPartyApp
    correlation_id: str = Field(default_factory=current_request_id)

    @classmethod
    def of(cls, c: Consent) -> "ConsentOut":
        return cls(
            consent_id=c.id, scopes=c.scopes, status=c.status,
            created_at=c.created_at, expires_at=c.expires_at, last_used=c.last_used,
            third_party_app=c.third_party_app,
        )

class ConsentDetailOut(BaseModel):
    consent_id: str
    scopes: list[ConsentScope]
    status: ConsentStatus
    created_at: datetime
    expires_at: datetime
    last_used: datetime | None
    third_party_app: ThirdPartyApp
    metadata: str | None
    revoked_at: datetime | None
    revocation_reason: str | None

    @classmethod
    def of(cls, c: Consent) -> "ConsentDetailOut":
        return cls(
            consent_id=c.id, scopes=c.scopes, status=c.status,
            created_at=c.created_at, expires_at=c.expires_at, last_used=c.last_used,
            third_party_app=c.third_party_app, metadata=c.metadata,
            revoked_at=c.revoked_at, revocation_reason=c.revocation_reason,
        )

class ConsentHistoryItem(BaseModel):
    consent_id: str
    scopes: list[ConsentScope]
    status: ConsentStatus
    action: str
    created_at: datetime
    revoked_at: datetime | None
    revocation_reason: str | None
    third_party_app: ThirdPartyApp

    @classmethod
    def of(cls, e: ConsentHistoryEntry) -> "ConsentHistoryItem":
        return cls(
            consent_id=e.id, scopes=e.scopes, status=e.status, action=e.action.value,
            created_at=e.created_at, revoked_at=e.revoked_at,
            revocation_reason=e.revocation_reason, third_party_app=e.third_party_app,
        )

class ConsentHistoryOut(BaseModel):
    success: bool = True
    consents: list[ConsentHistoryItem]
    correlation_id: str = Field(default_factory=current_request_id)

class ConsentStatsOut(BaseModel):
    success: bool = True
    stats: dict[str, int]
    correlation_id: str = Field(default_factory=current_request_id)

class ScopesOut(BaseModel):
    success: bool = True
    scopes: list[ConsentScope]
    descriptions: dict[str, str]
    correlation_id: str = Field(default_factory=current_request_id)
