"""Shared fixtures: a frozen clock, an in-memory store and the consent stack."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.modules.consent.models import ThirdPartyApp
from app.modules.consent.repository import ConsentRepository
from app.modules.consent.service import ConsentService
from app.modules.consent.validator import ConsentValidator
from app.platform.adapters.bus_noop import NoopEventBus
from app.platform.adapters.clock_system import FrozenClock
from app.platform.adapters.store_memory import InMemoryKeyValueStore
from app.platform.provider_registry import registry

T0 = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def bus() -> NoopEventBus:
    return NoopEventBus()


@pytest.fixture
def service(store: InMemoryKeyValueStore, clock: FrozenClock, bus: NoopEventBus) -> ConsentService:
    return ConsentService(ConsentRepository(store), clock=clock, bus=bus)


@pytest.fixture
def validator(service: ConsentService) -> ConsentValidator:
    return ConsentValidator(service)


@pytest.fixture
def finance_app() -> ThirdPartyApp:
    return ThirdPartyApp(name="Finance App", description="Personal finance management app")


@pytest.fixture
def client(clock: FrozenClock, bus: NoopEventBus):
    from app.main import create_app

    registry.reset()
    registry.override(kv_store=InMemoryKeyValueStore(), clock=clock, event_bus=bus)
    with TestClient(create_app()) as c:
        yield c
    registry.reset()
