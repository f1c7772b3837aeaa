"""Tests for the TheMealDB catalog client and the recipe routes."""

import pytest
import requests

import mealdb
from errors import CatalogUnavailable, StoreUnavailable
from favorites import FavoritesService, get_favorites_service_factory
from main import app

BEEF_STEW_MEAL = {
    "idMeal": "52874",
    "strMeal": "Beef Stew",
    "strMealThumb": "https://example/52874.jpg",
    "strInstructions": "Brown the beef. Simmer for two hours.",
    "strCategory": "Beef",
    "strArea": "British",
    "strYoutube": "https://www.youtube.com/watch?v=abc",
    "strTags": "Stew, Winter",
    "strIngredient1": "Beef",
    "strMeasure1": "1kg",
    "strIngredient2": "Carrots",
    "strMeasure2": " ",
    "strIngredient3": "",
    "strMeasure3": "2 tbsp",
    "strIngredient4": None,
    "strMeasure4": None,
    "strIngredient20": "Thyme",
    "strMeasure20": "1 sprig",
}


class StubResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class RecordedCalls(list):
    pass


@pytest.fixture
def catalog(monkeypatch):
    recorded = RecordedCalls()
    recorded.responses = {}

    def fake_get(url, params=None, timeout=None):
        recorded.append((url, params, timeout))
        return recorded.responses.get(url.rsplit("/", 1)[-1], StubResponse({"meals": None}))

    monkeypatch.setattr(mealdb.requests, "get", fake_get)
    return recorded


def test_extract_ingredients_keeps_named_slots_in_order():
    ingredients = mealdb.extract_ingredients(BEEF_STEW_MEAL)

    assert [(i.ingredient, i.measure) for i in ingredients] == [
        ("Beef", "1kg"),
        ("Carrots", ""),
        ("Thyme", "1 sprig"),
    ]


def test_search_by_keyword(catalog):
    catalog.responses["search.php"] = StubResponse({"meals": [BEEF_STEW_MEAL]})

    results = mealdb.search_by_keyword("stew")

    assert catalog == [(f"{mealdb.MEALDB_BASE}/search.php", {"s": "stew"}, mealdb.REQUEST_TIMEOUT)]
    assert len(results) == 1
    summary = results[0]
    assert summary.id == "52874"
    assert summary.name == "Beef Stew"
    assert summary.thumbnail_url == "https://example/52874.jpg"
    assert summary.category == "Beef"


def test_search_without_matches_returns_empty_list(catalog):
    assert mealdb.search_by_keyword("nothing") == []


def test_lookup_by_id(catalog):
    catalog.responses["lookup.php"] = StubResponse({"meals": [BEEF_STEW_MEAL]})

    detail = mealdb.lookup_by_id("52874")

    assert detail.area == "British"
    assert detail.youtube_url == "https://www.youtube.com/watch?v=abc"
    assert detail.tags == ["Stew", "Winter"]
    assert len(detail.ingredients) == 3


def test_lookup_unknown_id_returns_none(catalog):
    assert mealdb.lookup_by_id("0") is None


def test_http_errors_raise_catalog_unavailable(catalog):
    catalog.responses["search.php"] = StubResponse({}, status_code=503)

    with pytest.raises(CatalogUnavailable):
        mealdb.search_by_keyword("stew")


def test_transport_errors_raise_catalog_unavailable(monkeypatch):
    def fake_get(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(mealdb.requests, "get", fake_get)

    with pytest.raises(CatalogUnavailable):
        mealdb.lookup_by_id("52874")


def test_search_route(client, catalog):
    catalog.responses["search.php"] = StubResponse({"meals": [BEEF_STEW_MEAL]})

    response = client.get("/recipes/search", params={"q": "stew"})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["meals"][0]["thumbnailUrl"] == "https://example/52874.jpg"


def test_search_route_rejects_blank_term(client, catalog):
    response = client.get("/recipes/search", params={"q": "  "})

    assert response.status_code == 400
    assert catalog == []


def test_search_route_reports_catalog_failure(client, catalog):
    catalog.responses["search.php"] = StubResponse({}, status_code=500)

    response = client.get("/recipes/search", params={"q": "stew"})

    assert response.status_code == 502
    assert response.json() == {"message": CatalogUnavailable.message}


def test_recipe_route_flags_favorites(client, service, catalog):
    catalog.responses["lookup.php"] = StubResponse({"meals": [BEEF_STEW_MEAL]})

    assert client.get("/recipes/52874").json()["isFavorite"] is False

    service.add_favorite("52874", "Beef Stew", "https://example/52874.jpg")
    body = client.get("/recipes/52874").json()

    assert body["isFavorite"] is True
    assert body["ingredients"][0] == {"ingredient": "Beef", "measure": "1kg"}


def test_recipe_route_unknown_recipe(client, catalog):
    response = client.get("/recipes/0")

    assert response.status_code == 404


def test_non_object_payload_raises_catalog_unavailable(catalog):
    catalog.responses["search.php"] = StubResponse([{"idMeal": "52874"}])

    with pytest.raises(CatalogUnavailable):
        mealdb.search_by_keyword("stew")


def _raise_store_unavailable():
    raise StoreUnavailable()


def test_recipe_route_survives_unreachable_favorites_store(client, catalog):
    catalog.responses["lookup.php"] = StubResponse({"meals": [BEEF_STEW_MEAL]})
    app.dependency_overrides[get_favorites_service_factory] = lambda: _raise_store_unavailable

    response = client.get("/recipes/52874")

    assert response.status_code == 200
    assert response.json()["name"] == "Beef Stew"
    assert response.json()["isFavorite"] is False
    assert len(catalog) == 1


class FailingLookupService(FavoritesService):
    def __init__(self):
        pass

    def is_favorite(self, recipe_id):
        raise StoreUnavailable()


def test_recipe_route_survives_favorite_lookup_failure(client, catalog):
    catalog.responses["lookup.php"] = StubResponse({"meals": [BEEF_STEW_MEAL]})
    app.dependency_overrides[get_favorites_service_factory] = lambda: FailingLookupService

    response = client.get("/recipes/52874")

    assert response.status_code == 200
    assert response.json()["isFavorite"] is False
