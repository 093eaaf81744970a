import uuid
from datetime import datetime, timedelta
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from app.modules.consent.scopes import ConsentScope

class ConsentStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    EXPIRED = "expired"
    REVOKED = "revoked"

class ConsentAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    REVOKED = "revoked"
    SUSPENDED = "suspended"
    REACTIVATED = "reactivated"
    EXPIRED = "expired"

class ThirdPartyApp(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    logo_url: str | None = None
    website: str | None = None

class Consent(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    scopes: list[ConsentScope]
    status: ConsentStatus = ConsentStatus.ACTIVE
    created_at: datetime
    expires_at: datetime
    last_used: datetime | None = None
    revoked_at: datetime | None = None
    revocation_reason: str | None = None
    third_party_app: ThirdPartyApp
    metadata: str | None = None

    def grants(self, required: list[ConsentScope]) -> bool:
        return set(required).issubset(self.scopes)

class ConsentHistoryEntry(Consent):
    action: ConsentAction
    recorded_at: datetime

    @classmethod
    def snapshot(cls, consent: Consent, action: ConsentAction, at: datetime) -> "ConsentHistoryEntry":
        return cls(**consent.model_dump(), action=action, recorded_at=at)

def expires_at_for(created_at: datetime, duration_days: int) -> datetime:
    return created_at + timedelta(days=duration_days)

def derive_effective_status(consent: Consent, now: datetime) -> ConsentStatus:
    # Only an active consent lapses; suspended ones keep their status until reactivated.
    if consent.status == ConsentStatus.ACTIVE and now >= consent.expires_at:
        return ConsentStatus.EXPIRED
    return consent.status
