from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FavoriteRecipeIn(CamelModel):
    """
    Body of ``POST /favorites``.
    Fields are optional here so that missing values reach the service and are
    reported together as a single validation error.
    """
    recipe_id: Optional[str] = Field(None, description="TheMealDB recipe idMeal")
    recipe_name: Optional[str] = Field(None, description="Recipe title")
    image_url: Optional[str] = Field(None, description="Thumbnail image URL")


class FavoriteRecipe(CamelModel):
    """
    Favorite recipes collection schema
    Collection name: favoriterecipes
    """
    id: str = Field(..., description="Store-generated document id")
    recipe_id: str = Field(..., description="TheMealDB recipe idMeal, unique")
    recipe_name: str = Field(..., description="Recipe title")
    image_url: str = Field(..., description="Thumbnail image URL")
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "FavoriteRecipe":
        data = dict(document)
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)


class MessageResponse(BaseModel):
    message: str


class ValidationErrorResponse(MessageResponse):
    fields: List[str] = []


class Ingredient(BaseModel):
    ingredient: str
    measure: str = ""


class RecipeSummary(CamelModel):
    id: str
    name: str
    thumbnail_url: Optional[str] = None
    instructions: Optional[str] = None
    category: Optional[str] = None


class RecipeDetail(RecipeSummary):
    area: Optional[str] = None
    youtube_url: Optional[str] = None
    tags: List[str] = []
    ingredients: List[Ingredient] = []


class RecipeDetailResponse(RecipeDetail):
    is_favorite: bool = False


class RecipeSearchResponse(BaseModel):
    count: int
    meals: List[RecipeSummary]
