"""Client for TheMealDB recipe catalog. Results are neither cached nor retried."""
import logging
import os
from typing import Any, Dict, List, Optional

import requests

from errors import CatalogUnavailable
from schemas import Ingredient, RecipeDetail, RecipeSummary

logger = logging.getLogger(__name__)

MEALDB_BASE = os.getenv("MEALDB_BASE", "https://www.themealdb.com/api/json/v1/1")
REQUEST_TIMEOUT = 15
INGREDIENT_SLOTS = 20


def _get_meals(endpoint: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
    try:
        r = requests.get(f"{MEALDB_BASE}/{endpoint}", params=params, timeout=REQUEST_TIMEOUT)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError):
        logger.exception("TheMealDB request to %s failed", endpoint)
        raise CatalogUnavailable()
    if not isinstance(data, dict):
        logger.error("TheMealDB %s returned %s instead of an object", endpoint, type(data).__name__)
        raise CatalogUnavailable()
    return data.get("meals") or []


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def extract_ingredients(meal: Dict[str, Any]) -> List[Ingredient]:
    """Collect the ``strIngredientN``/``strMeasureN`` slots that name an ingredient, in order."""
    ingredients = []
    for i in range(1, INGREDIENT_SLOTS + 1):
        name = _clean(meal.get(f"strIngredient{i}"))
        if not name:
            continue
        measure = _clean(meal.get(f"strMeasure{i}")) or ""
        ingredients.append(Ingredient(ingredient=name, measure=measure))
    return ingredients


def _summary_fields(meal: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": meal["idMeal"],
        "name": meal.get("strMeal") or "",
        "thumbnail_url": _clean(meal.get("strMealThumb")),
        "instructions": _clean(meal.get("strInstructions")),
        "category": _clean(meal.get("strCategory")),
    }


def to_summary(meal: Dict[str, Any]) -> RecipeSummary:
    return RecipeSummary(**_summary_fields(meal))


def to_detail(meal: Dict[str, Any]) -> RecipeDetail:
    tags = _clean(meal.get("strTags"))
    return RecipeDetail(
        **_summary_fields(meal),
        area=_clean(meal.get("strArea")),
        youtube_url=_clean(meal.get("strYoutube")),
        tags=[t.strip() for t in tags.split(",") if t.strip()] if tags else [],
        ingredients=extract_ingredients(meal),
    )


def search_by_keyword(term: str) -> List[RecipeSummary]:
    meals = _get_meals("search.php", {"s": term})
    return [to_summary(m) for m in meals if m.get("idMeal")]


def lookup_by_id(recipe_id: str) -> Optional[RecipeDetail]:
    meals = _get_meals("lookup.php", {"i": recipe_id})
    if not meals:
        return None
    return to_detail(meals[0])
