"""Wiring for the ewbi operator.

Creates the controller manager with:
- The Federation context-id field index on the store
- One shared partner client registry
- The six resource reconcilers
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from ewbi.config import Settings
from ewbi.config import settings as default_settings
from ewbi.controllers import RECONCILERS
from ewbi.federation.clients import PartnerClientRegistry
from ewbi.federation.directory import FederationDirectory, register_indexes
from ewbi.observability import configure_logging
from ewbi.runtime.manager import ControllerManager, ManagerConfig
from ewbi.store.base import ObjectStore

logger = logging.getLogger(__name__)


def create_manager(
    store: ObjectStore,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ControllerManager:
    """Create a controller manager running every reconciler against ``store``.

    Args:
        store: Object store holding the resources
        settings: Operator settings, defaults to the environment
        transport: httpx transport for partner clients (tests)

    Returns:
        Configured manager, not yet started
    """
    settings = settings or default_settings
    register_indexes(store)

    clients = PartnerClientRegistry.from_settings(settings, transport=transport)
    directory = FederationDirectory(store)
    manager = ControllerManager(store, ManagerConfig.from_settings(settings), clients=clients)

    for reconciler_cls in RECONCILERS:
        manager.register(reconciler_cls(store, clients, directory=directory, settings=settings))
    return manager


@asynccontextmanager
async def run_operator(
    store: ObjectStore, settings: Settings | None = None
) -> AsyncIterator[ControllerManager]:
    """Run the operator for the duration of the context.

    On startup logging is configured and the manager starts reconciling
    every existing object. On shutdown workers stop and partner clients
    are closed.
    """
    settings = settings or default_settings
    configure_logging(json_format=settings.log_json, level=settings.log_level)

    manager = create_manager(store, settings)
    logger.info(f"Starting {settings.app_name} ({settings.env})")
    async with manager:
        yield manager
    logger.info(f"{settings.app_name} shutdown complete")
