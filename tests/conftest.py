"""Global pytest configuration and fixtures.

Provides the in-memory store, the fake partner and reconciler settings
shared by the unit tests.
"""

from __future__ import annotations

import pytest
from fakes import FakePartner

from ewbi.config import Settings
from ewbi.federation.clients import PartnerClientRegistry
from ewbi.federation.directory import register_indexes
from ewbi.store.memory import InMemoryStore


@pytest.fixture
def settings() -> Settings:
    """Settings with the default requeue contract and fast retries."""
    return Settings(
        guest_requeue_delay=5.0,
        poll_interval=3.0,
        retry_base_delay=0.01,
        retry_max_delay=0.05,
        max_concurrent_reconciles=2,
    )


@pytest.fixture
def store() -> InMemoryStore:
    """Empty store with the federation context-id index registered."""
    store = InMemoryStore()
    register_indexes(store)
    return store


@pytest.fixture
def partner() -> FakePartner:
    return FakePartner()


@pytest.fixture
async def clients(partner: FakePartner):
    """Client registry whose clients talk to the fake partner."""
    registry = PartnerClientRegistry(transport=partner.transport)
    yield registry
    await registry.aclose()
