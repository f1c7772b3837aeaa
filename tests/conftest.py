"""Shared fixtures backed by an in-memory MongoDB."""

from collections.abc import Iterator

import mongomock
import pytest
from fastapi.testclient import TestClient

from favorites import (
    COLLECTION_NAME,
    FavoritesService,
    FavoritesStore,
    get_favorites_service,
    get_favorites_service_factory,
)
from main import app


@pytest.fixture
def collection():
    client = mongomock.MongoClient()
    yield client["recipes-test"][COLLECTION_NAME]
    client.close()


@pytest.fixture
def store(collection) -> FavoritesStore:
    store = FavoritesStore(collection)
    store.ensure_indexes()
    return store


@pytest.fixture
def service(store) -> FavoritesService:
    return FavoritesService(store)


@pytest.fixture
def client(service) -> Iterator[TestClient]:
    app.dependency_overrides[get_favorites_service] = lambda: service
    app.dependency_overrides[get_favorites_service_factory] = lambda: lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
