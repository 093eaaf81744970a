"""HTTP surface: consent management and consent-gated account routes."""

from __future__ import annotations

import pytest

from app.core.security import issue_token

API = "/api/v1"

NEW_CONSENT = {
    "scopes": ["accounts", "balances"],
    "duration": "30",
    "accept_terms": True,
    "third_party_app": {"name": "Finance App", "description": "Personal finance management app"},
}


def _create(client, body=None, headers=None) -> dict:
    res = client.post(f"{API}/consent/create", json=body or NEW_CONSENT, headers=headers or {})
    assert res.status_code == 201, res.text
    return res.json()


def test_health(client) -> None:
    assert client.get(f"{API}/health").json() == {"status": "ok"}


def test_public_scopes(client) -> None:
    body = client.get(f"{API}/consent/scopes").json()
    assert body["success"] is True
    assert "payments" in body["scopes"]
    assert body["descriptions"]["payments"] == "Ability to make payments"


def test_create_and_read_back(client) -> None:
    created = _create(client)
    assert created["status"] == "active"
    assert created["scopes"] == ["accounts", "balances"]
    assert created["expires_at"].startswith("2024-02-14T10:30:00")

    detail = client.get(f"{API}/consent/{created['consent_id']}").json()
    assert detail["consent_id"] == created["consent_id"]
    assert detail["third_party_app"]["name"] == "Finance App"


def test_correlation_id_follows_request_id(client) -> None:
    res = client.post(f"{API}/consent/create", json=NEW_CONSENT, headers={"x-request-id": "req-42"})
    assert res.headers["x-request-id"] == "req-42"
    assert res.json()["correlation_id"] == "req-42"


def test_validation_errors_map_to_400(client) -> None:
    res = client.post(f"{API}/consent/create", json={**NEW_CONSENT, "scopes": ["accounts", "crypto"]})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "InvalidScope"
    assert body["invalid_scopes"] == ["crypto"]

    res = client.post(f"{API}/consent/create", json={**NEW_CONSENT, "accept_terms": False})
    assert res.status_code == 400
    assert res.json()["error"] == "TermsNotAccepted"

    res = client.post(f"{API}/consent/create", json={**NEW_CONSENT, "duration": "zero"})
    assert res.json()["error"] == "InvalidDuration"


def test_not_found_and_forbidden(client) -> None:
    assert client.get(f"{API}/consent/nope").status_code == 404

    consent_id = _create(client)["consent_id"]
    other = {"Authorization": f"Bearer {issue_token('user-999')}"}
    res = client.get(f"{API}/consent/{consent_id}", headers=other)
    assert res.status_code == 403
    assert res.json()["error"] == "ConsentForbidden"


def test_bad_token_is_401(client) -> None:
    res = client.get(f"{API}/consent/stats", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


def test_revoke_twice(client) -> None:
    consent_id = _create(client)["consent_id"]
    res = client.request("DELETE", f"{API}/consent/{consent_id}", json={"reason": "fraud"})
    assert res.status_code == 200
    assert res.json()["status"] == "revoked"
    assert client.get(f"{API}/consent/{consent_id}").json()["revocation_reason"] == "fraud"

    again = client.request("DELETE", f"{API}/consent/{consent_id}")
    assert again.status_code == 400
    assert again.json()["error"] == "ConsentAlreadyRevoked"


def test_update_suspend_reactivate(client) -> None:
    consent_id = _create(client)["consent_id"]

    res = client.put(f"{API}/consent/{consent_id}", json={"scopes": ["accounts", "transactions"], "duration": "7"})
    assert res.status_code == 200
    assert res.json()["expires_at"].startswith("2024-01-22T10:30:00")

    assert client.post(f"{API}/consent/{consent_id}/suspend", json={"reason": "security"}).json()["status"] == "suspended"
    res = client.post(f"{API}/consent/{consent_id}/suspend", json={"reason": "again"})
    assert res.status_code == 400
    assert res.json()["error"] == "InvalidConsentState"

    assert client.post(f"{API}/consent/{consent_id}/suspend", json={}).status_code == 422
    assert client.post(f"{API}/consent/{consent_id}/reactivate").json()["status"] == "active"


def test_history_active_and_stats(client, clock) -> None:
    keep = _create(client)["consent_id"]
    gone = _create(client, {**NEW_CONSENT, "duration": "1"})["consent_id"]
    clock.advance(days=2)

    active = client.get(f"{API}/consent/active").json()
    assert [c["consent_id"] for c in active] == [keep]

    stats = client.get(f"{API}/consent/stats").json()["stats"]
    assert stats["total"] == 2 and stats["active"] == 1 and stats["expired"] == 1

    history = client.get(f"{API}/consent/history").json()["consents"]
    assert [h["consent_id"] for h in history] == [keep, gone]
    assert history[1]["status"] == "expired"


def test_accounts_require_consent_header(client) -> None:
    res = client.get(f"{API}/accounts")
    assert res.status_code == 403
    assert res.json()["error"] == "ConsentIdMissing"


def test_accounts_with_consent(client) -> None:
    consent_id = _create(client)["consent_id"]
    headers = {"x-consent-id": consent_id}

    res = client.get(f"{API}/accounts", headers=headers)
    assert res.status_code == 200
    assert [a["id"] for a in res.json()["accounts"]] == ["account-1", "account-2"]

    balance = client.get(f"{API}/accounts/account-1/balance", headers=headers).json()
    assert balance["balance"] == 15420.50

    assert client.get(f"{API}/consent/{consent_id}").json()["last_used"] is not None


def test_scope_not_granted_is_insufficient(client) -> None:
    consent_id = _create(client)["consent_id"]
    res = client.get(f"{API}/accounts/account-1/transactions", headers={"x-consent-id": consent_id})
    assert res.status_code == 403
    assert res.json()["error"] == "InsufficientConsent"


def test_transactions_paginate(client) -> None:
    consent_id = _create(client, {**NEW_CONSENT, "scopes": ["accounts", "transactions"]})["consent_id"]
    headers = {"x-consent-id": consent_id}

    page = client.get(f"{API}/accounts/account-1/transactions", params={"limit": 2}, headers=headers).json()
    assert page["total"] == 3
    assert [t["id"] for t in page["transactions"]] == ["txn-1", "txn-2"]

    rest = client.get(
        f"{API}/accounts/account-1/transactions",
        params={"limit": 2, "cursor": page["next_cursor"]},
        headers=headers,
    ).json()
    assert [t["id"] for t in rest["transactions"]] == ["txn-3"]
    assert rest["next_cursor"] is None


def test_consent_of_another_user_does_not_open_accounts(client) -> None:
    consent_id = _create(client)["consent_id"]
    other = {"Authorization": f"Bearer {issue_token('user-999')}", "x-consent-id": consent_id}
    res = client.get(f"{API}/accounts", headers=other)
    assert res.status_code == 403
    assert res.json()["error"] == "InsufficientConsent"


def test_expired_consent_closes_accounts(client, clock) -> None:
    consent_id = _create(client, {**NEW_CONSENT, "duration": "1"})["consent_id"]
    clock.advance(days=1, minutes=1)

    res = client.get(f"{API}/accounts", headers={"x-consent-id": consent_id})
    assert res.status_code == 403
    assert client.get(f"{API}/consent/{consent_id}").json()["status"] == "expired"


def test_boolean_duration_is_invalid(client) -> None:
    res = client.post(f"{API}/consent/create", json={**NEW_CONSENT, "duration": True})
    assert res.status_code == 400
    assert res.json()["error"] == "InvalidDuration"

    consent_id = _create(client)["consent_id"]
    res = client.put(f"{API}/consent/{consent_id}", json={"duration": True})
    assert res.status_code == 400
    assert res.json()["error"] == "InvalidDuration"


def test_unhandled_error_is_500_with_correlation_id(clock, bus) -> None:
    from fastapi.testclient import TestClient

    from app.main import create_app
    from app.platform.adapters.store_memory import InMemoryKeyValueStore
    from app.platform.provider_registry import registry

    registry.reset()
    registry.override(kv_store=InMemoryKeyValueStore(), clock=clock, event_bus=bus)
    app = create_app()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("boom")

    with TestClient(app, raise_server_exceptions=False) as c:
        res = c.get("/boom", headers={"x-request-id": "req-500"})
    registry.reset()

    assert res.status_code == 500
    assert res.json() == {"message": "An internal server error occurred.", "correlation_id": "req-500"}
    assert res.headers["x-request-id"] == "req-500"


@pytest.mark.asyncio
async def test_principal_is_token_subject_only() -> None:
    from fastapi.security import HTTPAuthorizationCredentials

    from app.core.security import Principal, get_principal

    token = issue_token("user-7", roles=["admin"])
    creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
    principal = await get_principal(creds)
    assert principal == Principal(user_id="user-7")
    assert principal.model_dump() == {"user_id": "user-7"}
