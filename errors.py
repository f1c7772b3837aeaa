from typing import List, Optional


class RecipeAppError(Exception):
    """Base class for errors surfaced by the recipe backend."""

    message = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class FavoritesError(RecipeAppError):
    pass


class ValidationError(FavoritesError):
    message = "Missing required recipe details (ID, name, or image URL)."

    def __init__(self, fields: List[str], message: Optional[str] = None):
        self.fields = list(fields)
        super().__init__(message)


class DuplicateError(FavoritesError):
    message = "This recipe is already in your favorites!"


class NotFoundError(FavoritesError):
    message = "Recipe not found in your favorites."


class StoreUnavailable(FavoritesError):
    message = "The favorites store is unavailable right now. Please try again."


class ConstraintViolation(FavoritesError):
    """Raised by the store when the unique index on ``recipeId`` rejects a write."""

    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(f"recipeId {recipe_id!r} already stored")


class CatalogUnavailable(RecipeAppError):
    message = "Recipe search failed. Please try again."
