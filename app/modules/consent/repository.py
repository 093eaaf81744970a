from typing import Sequence
from app.platform.ports.kv_store import KeyValueStorePort
from app.modules.consent.models import Consent, ConsentHistoryEntry

class ConsentRepository:
    def __init__(self, store: KeyValueStorePort):
        self.store = store

    @staticmethod
    def _consent_key(consent_id: str) -> str:
        return f"consent:{consent_id}"

    @staticmethod
    def _user_index_key(user_id: str) -> str:
        return f"consent_user:{user_id}"

    @staticmethod
    def _history_key(user_id: str) -> str:
        return f"consent_history:{user_id}"

    async def get(self, consent_id: str) -> Consent | None:
        data = await self.store.get(self._consent_key(consent_id))
        if data is None:
            return None
        return Consent.model_validate(data)

    async def save(self, consent: Consent) -> Consent:
        await self.store.put(self._consent_key(consent.id), consent.model_dump(mode="json"))
        ids = await self.store.get(self._user_index_key(consent.user_id)) or []
        if consent.id not in ids:
            ids.append(consent.id)
            await self.store.put(self._user_index_key(consent.user_id), ids)
        return consent

    async def list_for_user(self, user_id: str) -> Sequence[Consent]:
        ids = await self.store.get(self._user_index_key(user_id)) or []
        out = []
        for consent_id in ids:
            c = await self.get(consent_id)
            if c is not None and c.user_id == user_id:
                out.append(c)
        return out

    async def append_history(self, entry: ConsentHistoryEntry) -> None:
        key = self._history_key(entry.user_id)
        entries = await self.store.get(key) or []
        entries.append(entry.model_dump(mode="json"))
        await self.store.put(key, entries)

    async def history_for_user(self, user_id: str) -> Sequence[ConsentHistoryEntry]:
        entries = await self.store.get(self._history_key(user_id)) or []
        return [ConsentHistoryEntry.model_validate(e) for e in entries]
