"""
Favorite recipes: storage contract and the service operations on top of it.

A favorite is keyed by the catalog ``recipeId``. The unique index on that field
is what guarantees at most one record per recipe; the service's own lookup
before insert only gives a friendlier answer in the common case.
"""
import logging
import threading
from typing import Callable, List, Optional

from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from database import create_document, get_db, get_documents
from errors import (
    ConstraintViolation,
    DuplicateError,
    NotFoundError,
    StoreUnavailable,
    ValidationError,
)
from schemas import FavoriteRecipe

logger = logging.getLogger(__name__)

COLLECTION_NAME = "favoriterecipes"


class FavoritesStore:
    def __init__(self, collection: Collection):
        self.collection = collection

    def ensure_indexes(self) -> None:
        try:
            self.collection.create_index(
                [("recipeId", ASCENDING)], unique=True, name="recipeId_unique"
            )
        except PyMongoError:
            logger.exception("Failed to create unique index on %s", self.collection.name)
            raise StoreUnavailable()

    def insert(self, recipe_id: str, recipe_name: str, image_url: str) -> FavoriteRecipe:
        try:
            document = create_document(
                self.collection,
                {"recipeId": recipe_id, "recipeName": recipe_name, "imageUrl": image_url},
            )
        except DuplicateKeyError:
            raise ConstraintViolation(recipe_id)
        except PyMongoError:
            logger.exception("Failed to insert favorite %s", recipe_id)
            raise StoreUnavailable()
        return FavoriteRecipe.from_document(document)

    def find_all(self) -> List[FavoriteRecipe]:
        try:
            documents = get_documents(self.collection)
        except PyMongoError:
            logger.exception("Failed to list favorites")
            raise StoreUnavailable()
        return [FavoriteRecipe.from_document(d) for d in documents]

    def find_by_recipe_id(self, recipe_id: str) -> Optional[FavoriteRecipe]:
        try:
            document = self.collection.find_one({"recipeId": recipe_id})
        except PyMongoError:
            logger.exception("Failed to look up favorite %s", recipe_id)
            raise StoreUnavailable()
        if document is None:
            return None
        return FavoriteRecipe.from_document(document)

    def delete_by_recipe_id(self, recipe_id: str) -> int:
        try:
            result = self.collection.delete_one({"recipeId": recipe_id})
        except PyMongoError:
            logger.exception("Failed to delete favorite %s", recipe_id)
            raise StoreUnavailable()
        return result.deleted_count


def _is_blank(value: Optional[str]) -> bool:
    return not isinstance(value, str) or not value.strip()


class FavoritesService:
    def __init__(self, store: FavoritesStore):
        self.store = store

    def add_favorite(
        self,
        recipe_id: Optional[str],
        recipe_name: Optional[str],
        image_url: Optional[str],
    ) -> FavoriteRecipe:
        missing = [
            field
            for field, value in (
                ("recipeId", recipe_id),
                ("recipeName", recipe_name),
                ("imageUrl", image_url),
            )
            if _is_blank(value)
        ]
        if missing:
            raise ValidationError(missing)

        if self.store.find_by_recipe_id(recipe_id) is not None:
            raise DuplicateError()

        try:
            favorite = self.store.insert(recipe_id, recipe_name, image_url)
        except ConstraintViolation:
            # Another request inserted the same recipe after our lookup.
            logger.info("Concurrent add of favorite %s rejected by unique index", recipe_id)
            raise DuplicateError()

        logger.info("Added favorite %s (%s)", recipe_id, recipe_name)
        return favorite

    def remove_favorite(self, recipe_id: Optional[str]) -> int:
        if _is_blank(recipe_id):
            raise NotFoundError()

        removed = self.store.delete_by_recipe_id(recipe_id)
        if removed == 0:
            raise NotFoundError()

        logger.info("Removed favorite %s", recipe_id)
        return removed

    def list_favorites(self) -> List[FavoriteRecipe]:
        return self.store.find_all()

    def is_favorite(self, recipe_id: str) -> bool:
        return self.store.find_by_recipe_id(recipe_id) is not None


_store: Optional[FavoritesStore] = None
_store_lock = threading.Lock()


def get_favorites_store() -> FavoritesStore:
    """Return the shared store, creating its unique index the first time."""
    global _store

    if _store is not None:
        return _store

    with _store_lock:
        if _store is None:
            store = FavoritesStore(get_db()[COLLECTION_NAME])
            store.ensure_indexes()
            _store = store
    return _store


def reset_favorites_store() -> None:
    global _store

    with _store_lock:
        _store = None


def get_favorites_service() -> FavoritesService:
    return FavoritesService(get_favorites_store())


def get_favorites_service_factory() -> Callable[[], FavoritesService]:
    """Defer store acquisition to routes that can do without favorites."""
    return get_favorites_service
