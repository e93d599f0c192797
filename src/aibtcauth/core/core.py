from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, cast

from aibtcauth.config import Config
from aibtcauth.core.db import KeyValueStore, MongoKeyValueStore

if TYPE_CHECKING:
    from aibtcauth.core.modules.access.service import AccessService
    from aibtcauth.core.modules.session.service import SessionService
    from aibtcauth.core.modules.signature.service import SignatureService


class Service:
    """Base class for services sharing the key-value store and the configuration."""

    def __init__(self, store: KeyValueStore, config: Config) -> None:
        self.store = store
        self.config = config

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""


class Services:
    """Service registry that automatically discovers and initializes services."""

    signature: SignatureService
    session: SessionService
    access: AccessService

    def __init__(self, store: KeyValueStore, config: Config) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []

        # Service configuration: (attribute_name, module_path, class_name)
        service_configs = [
            ("signature", "aibtcauth.core.modules.signature.service", "SignatureService"),
            ("session", "aibtcauth.core.modules.session.service", "SessionService"),
            ("access", "aibtcauth.core.modules.access.service", "AccessService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(store, config)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in self._services:
            await service.on_stop()


class Core:
    """Container providing config, the key-value store, and all service instances."""

    config: Config
    store: KeyValueStore
    services: Services

    def __init__(self, config: Config, store: KeyValueStore | None = None) -> None:
        """Initialize core with config and a store (MongoDB unless one is given)."""
        self.config = config
        self.store = store or MongoKeyValueStore(
            config.database_url,
            collection=config.store_collection,
            timeout=config.store_timeout_seconds,
            max_retries=config.store_max_retries,
        )
        self.services = Services(self.store, config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.store.on_start()
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close the store client on shutdown."""
        await self.services.stop_all()
        await self.store.close()
