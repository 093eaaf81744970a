import logging
from typing import Iterable
from app.modules.consent.models import ConsentStatus
from app.modules.consent.scopes import ConsentScope
from app.modules.consent.service import ConsentService

log = logging.getLogger("consent.validator")

class ConsentValidator:
    """Hot-path admit/deny check.

    Every failure collapses to False so callers learn nothing about why a
    consent was refused. The only write on a failure path is the persisted
    active -> expired flip.
    """

    def __init__(self, service: ConsentService):
        self.service = service

    async def validate(self, user_id: str, consent_id: str, required_scopes: Iterable[str | ConsentScope]) -> bool:
        try:
            required = [ConsentScope(s) for s in required_scopes]
        except ValueError:
            log.debug("Deny consent=%s: unknown required scope in %s", consent_id, required_scopes)
            return False

        async with self.service.locks.for_consent(consent_id):
            consent = await self.service.repo.get(consent_id)
            if consent is None:
                log.debug("Deny consent=%s: not found", consent_id)
                return False
            if consent.user_id != user_id:
                log.debug("Deny consent=%s: not owned by user=%s", consent_id, user_id)
                return False
            if consent.status != ConsentStatus.ACTIVE:
                log.debug("Deny consent=%s: status=%s", consent_id, consent.status.value)
                return False

            now = self.service.clock.now()
            consent = await self.service.apply_expiry(consent, now)
            if consent.status != ConsentStatus.ACTIVE:
                log.debug("Deny consent=%s: expired", consent_id)
                return False

            if not consent.grants(required):
                log.debug("Deny consent=%s: missing scopes %s", consent_id, [s.value for s in required if s not in consent.scopes])
                return False

            last_used = now if consent.last_used is None or consent.last_used < now else consent.last_used
            async with self.service.locks.for_user(consent.user_id):
                await self.service.repo.save(consent.model_copy(update={"last_used": last_used}))
            return True
