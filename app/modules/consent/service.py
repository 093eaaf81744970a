import asyncio
import logging
import weakref
from datetime import datetime
from typing import Any, Sequence
from app.core.config import settings
from app.platform.ports.clock import ClockPort
from app.platform.ports.event_bus import EventBusPort
from app.modules.consent.errors import (
    ConsentNotFound, ConsentForbidden, InvalidConsentState, ConsentAlreadyRevoked,
    ConsentExpired, TermsNotAccepted, InvalidDuration,
)
from app.modules.consent.models import (
    Consent, ConsentAction, ConsentHistoryEntry, ConsentStatus, ThirdPartyApp,
    derive_effective_status, expires_at_for,
)
from app.modules.consent.repository import ConsentRepository
from app.modules.consent.scopes import ConsentScope, validate_scopes

log = logging.getLogger("consent.service")

EVENTS_TOPIC = "consent.events"

def parse_duration_days(value: Any) -> int:
    """Duration in whole days, given as an int or a decimal string ("30")."""
    if isinstance(value, bool):
        raise InvalidDuration()
    if isinstance(value, int):
        days = value
    elif isinstance(value, str) and value.strip().isdigit():
        days = int(value.strip())
    else:
        raise InvalidDuration()
    if days <= 0:
        raise InvalidDuration()
    if days > settings.MAX_CONSENT_DURATION_DAYS:
        raise InvalidDuration(f"Duration cannot exceed {settings.MAX_CONSENT_DURATION_DAYS} days")
    return days

class ConsentLocks:
    """asyncio.Lock per consent id and per user, dropped once nobody holds a reference.

    Consent locks cover a single record; user locks cover the id index and
    history list shared by all of a user's consents. A user lock is only ever
    taken inside a consent lock, never the other way round.
    """

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def for_consent(self, consent_id: str) -> asyncio.Lock:
        return self._get(f"consent:{consent_id}")

    def for_user(self, user_id: str) -> asyncio.Lock:
        return self._get(f"user:{user_id}")

class ConsentService:
    def __init__(self, repo: ConsentRepository, clock: ClockPort, bus: EventBusPort, locks: ConsentLocks | None = None):
        self.repo = repo
        self.clock = clock
        self.bus = bus
        self.locks = locks or ConsentLocks()

    # ---- internals shared with the validator ----

    async def record(self, consent: Consent, action: ConsentAction, at: datetime) -> Consent:
        async with self.locks.for_user(consent.user_id):
            await self.repo.save(consent)
            await self.repo.append_history(ConsentHistoryEntry.snapshot(consent, action, at))
        try:
            await self.bus.publish(
                topic=EVENTS_TOPIC,
                key=consent.id,
                value={
                    "event_type": f"consent.{action.value}",
                    "consent_id": consent.id,
                    "user_id": consent.user_id,
                    "status": consent.status.value,
                    "scopes": [s.value for s in consent.scopes],
                    "occurred_at": at.isoformat(),
                },
            )
        except Exception:  # noqa
            log.exception("Publish failed for consent=%s action=%s", consent.id, action.value)
        return consent

    async def apply_expiry(self, consent: Consent, now: datetime) -> Consent:
        """Persist the active -> expired flip when the consent has lapsed."""
        effective = derive_effective_status(consent, now)
        if effective == consent.status:
            return consent
        expired = consent.model_copy(update={"status": effective})
        log.info("Consent %s expired (expires_at=%s)", consent.id, consent.expires_at.isoformat())
        return await self.record(expired, ConsentAction.EXPIRED, now)

    async def _owned(self, user_id: str, consent_id: str) -> Consent:
        consent = await self.repo.get(consent_id)
        if consent is None:
            raise ConsentNotFound()
        if consent.user_id != user_id:
            raise ConsentForbidden()
        return consent

    # ---- operations ----

    async def create(
        self,
        user_id: str,
        scopes: Sequence[str | ConsentScope],
        duration_days: int | str,
        accept_terms: bool,
        app: ThirdPartyApp,
        metadata: str | None = None,
    ) -> Consent:
        if not accept_terms:
            raise TermsNotAccepted()
        granted = validate_scopes(scopes)
        days = parse_duration_days(duration_days)

        now = self.clock.now()
        consent = Consent(
            user_id=user_id,
            scopes=granted,
            status=ConsentStatus.ACTIVE,
            created_at=now,
            expires_at=expires_at_for(now, days),
            third_party_app=app,
            metadata=metadata,
        )
        await self.record(consent, ConsentAction.CREATED, now)
        log.info("Consent %s created for user=%s scopes=%s days=%d", consent.id, user_id, [s.value for s in granted], days)
        return consent

    async def get(self, user_id: str, consent_id: str) -> Consent:
        async with self.locks.for_consent(consent_id):
            consent = await self._owned(user_id, consent_id)
            return await self.apply_expiry(consent, self.clock.now())

    async def update(self, user_id: str, consent_id: str, changes: dict[str, Any]) -> Consent:
        async with self.locks.for_consent(consent_id):
            consent = await self._owned(user_id, consent_id)
            if consent.status != ConsentStatus.ACTIVE:
                raise InvalidConsentState("Only active consents can be updated")
            now = self.clock.now()
            if derive_effective_status(consent, now) == ConsentStatus.EXPIRED:
                await self.apply_expiry(consent, now)
                raise ConsentExpired("Cannot update expired consent")

            update: dict[str, Any] = {}
            if changes.get("scopes") is not None:
                update["scopes"] = validate_scopes(changes["scopes"])
            if changes.get("duration") is not None:
                days = parse_duration_days(changes["duration"])
                update["expires_at"] = expires_at_for(consent.created_at, days)
            if "metadata" in changes:
                update["metadata"] = changes["metadata"]

            updated = consent.model_copy(update=update)
            await self.record(updated, ConsentAction.UPDATED, now)
            log.info("Consent %s updated fields=%s", consent_id, sorted(update))
            return updated

    async def revoke(self, user_id: str, consent_id: str, reason: str | None = None) -> Consent:
        async with self.locks.for_consent(consent_id):
            consent = await self._owned(user_id, consent_id)
            if consent.status == ConsentStatus.REVOKED:
                raise ConsentAlreadyRevoked()
            now = self.clock.now()
            revoked = consent.model_copy(update={
                "status": ConsentStatus.REVOKED,
                "revoked_at": now,
                "revocation_reason": reason or settings.DEFAULT_REVOCATION_REASON,
            })
            await self.record(revoked, ConsentAction.REVOKED, now)
            log.info("Consent %s revoked: %s", consent_id, revoked.revocation_reason)
            return revoked

    async def suspend(self, user_id: str, consent_id: str, reason: str) -> Consent:
        if not reason or not reason.strip():
            raise InvalidConsentState("A suspension reason is required")
        async with self.locks.for_consent(consent_id):
            consent = await self._owned(user_id, consent_id)
            now = self.clock.now()
            consent = await self.apply_expiry(consent, now)
            if consent.status != ConsentStatus.ACTIVE:
                raise InvalidConsentState("Only active consents can be suspended")
            note = f"SUSPENDED: {reason}"
            suspended = consent.model_copy(update={
                "status": ConsentStatus.SUSPENDED,
                "metadata": f"{consent.metadata}; {note}" if consent.metadata else note,
            })
            await self.record(suspended, ConsentAction.SUSPENDED, now)
            log.info("Consent %s suspended: %s", consent_id, reason)
            return suspended

    async def reactivate(self, user_id: str, consent_id: str) -> Consent:
        async with self.locks.for_consent(consent_id):
            consent = await self._owned(user_id, consent_id)
            if consent.status != ConsentStatus.SUSPENDED:
                raise InvalidConsentState("Only suspended consents can be reactivated")
            now = self.clock.now()
            if now >= consent.expires_at:
                raise ConsentExpired("Cannot reactivate expired consent")
            reactivated = consent.model_copy(update={"status": ConsentStatus.ACTIVE})
            await self.record(reactivated, ConsentAction.REACTIVATED, now)
            log.info("Consent %s reactivated", consent_id)
            return reactivated

    async def history(self, user_id: str) -> list[ConsentHistoryEntry]:
        latest: dict[str, ConsentHistoryEntry] = {}
        for entry in await self.repo.history_for_user(user_id):
            latest[entry.id] = entry
        return list(latest.values())

    async def _sweep(self, user_id: str) -> list[Consent]:
        now = self.clock.now()
        out = []
        for consent in await self.repo.list_for_user(user_id):
            async with self.locks.for_consent(consent.id):
                current = await self.repo.get(consent.id) or consent
                out.append(await self.apply_expiry(current, now))
        return out

    async def active_consents(self, user_id: str) -> list[Consent]:
        return [c for c in await self._sweep(user_id) if c.status == ConsentStatus.ACTIVE]

    async def stats(self, user_id: str) -> dict[str, int]:
        consents = await self._sweep(user_id)
        counts = {"total": len(consents)}
        for status in ConsentStatus:
            counts[status.value] = sum(1 for c in consents if c.status == status)
        return counts
