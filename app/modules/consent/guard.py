import logging
from dataclasses import dataclass
from fastapi import Depends, Request
from app.core.config import settings
from app.core.security import get_principal, Principal
from app.modules.consent.errors import ConsentIdMissing, InsufficientConsent
from app.modules.consent.scopes import ConsentScope
from app.modules.consent.validator import ConsentValidator

log = logging.getLogger("consent.guard")

@dataclass(frozen=True)
class ConsentContext:
    user_id: str
    consent_id: str | None
    scopes: tuple[ConsentScope, ...]

class ConsentGuard:
    """Policy enforcement point. Owns no state; the validator decides."""

    def __init__(self, validator: ConsentValidator):
        self.validator = validator

    async def check(self, user_id: str, consent_id: str | None, required: tuple[ConsentScope, ...]) -> ConsentContext:
        if not required:
            return ConsentContext(user_id=user_id, consent_id=consent_id, scopes=())
        if not consent_id:
            log.info("Rejected user=%s: no consent id for scopes=%s", user_id, [s.value for s in required])
            raise ConsentIdMissing()
        if not await self.validator.validate(user_id, consent_id, required):
            log.info("Rejected user=%s consent=%s for scopes=%s", user_id, consent_id, [s.value for s in required])
            raise InsufficientConsent()
        return ConsentContext(user_id=user_id, consent_id=consent_id, scopes=required)

def get_consent_guard(request: Request) -> ConsentGuard:
    return ConsentGuard(request.app.state.consent_validator)

def require_consent(*needed: ConsentScope):
    """Declare the consent scopes a route needs; use as a FastAPI dependency."""
    required = tuple(ConsentScope(s) for s in needed)

    async def dep(
        request: Request,
        principal: Principal = Depends(get_principal),
        guard: ConsentGuard = Depends(get_consent_guard),
    ) -> ConsentContext:
        consent_id = request.headers.get(settings.CONSENT_HEADER)
        return await guard.check(principal.user_id, consent_id, required)

    dep.required_scopes = required
    return dep
