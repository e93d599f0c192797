"""Shared pytest fixtures."""

from collections.abc import Iterator

import pytest
from eth_keys import keys
from fastapi.testclient import TestClient
from helpers import BACKEND_KEY, FRONTEND_KEY, FakeClock, MemoryKeyValueStore, make_config

from aibtcauth.app import App
from aibtcauth.config import Config
from aibtcauth.core.core import Core
from aibtcauth.web.server import create_fastapi_app


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> MemoryKeyValueStore:
    """Store seeded with the shared keys of both trusted callers."""
    store = MemoryKeyValueStore(clock)
    store.set("key:aibtcdev-frontend", FRONTEND_KEY)
    store.set("key:aibtcdev-backend", BACKEND_KEY)
    return store


@pytest.fixture
def config() -> Config:
    return make_config()


@pytest.fixture
def core(config, store) -> Core:
    return Core(config, store)


@pytest.fixture
def private_key() -> keys.PrivateKey:
    return keys.PrivateKey(bytes.fromhex("4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"))


@pytest.fixture
def other_private_key() -> keys.PrivateKey:
    return keys.PrivateKey(bytes.fromhex("8da4ef21b864d2cc526dbdb2a120bd2874c36c9d0a1fb7f8c63d7f7a8b41de8f"))


@pytest.fixture
def public_key_hex(private_key) -> str:
    return private_key.public_key.to_compressed_bytes().hex()


@pytest.fixture
def client(config, store) -> Iterator[TestClient]:
    fastapi_app = create_fastapi_app(App(config, store), config)
    with TestClient(fastapi_app) as test_client:
        yield test_client
