import logging
import os
from contextlib import asynccontextmanager
from typing import Callable, List

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import database
import mealdb
from errors import (
    CatalogUnavailable,
    DuplicateError,
    NotFoundError,
    StoreUnavailable,
    ValidationError,
)
from favorites import (
    FavoritesService,
    get_favorites_service,
    get_favorites_service_factory,
    reset_favorites_store,
)
from schemas import (
    FavoriteRecipe,
    FavoriteRecipeIn,
    MessageResponse,
    RecipeDetailResponse,
    RecipeSearchResponse,
    ValidationErrorResponse,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    reset_favorites_store()
    database.close_client()


app = FastAPI(title="Recipe Favorites API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    body = ValidationErrorResponse(message=exc.message, fields=exc.fields)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [
        e["loc"][-1]
        for e in exc.errors()
        if e.get("loc") and isinstance(e["loc"][-1], str) and e["loc"][-1] != "body"
    ]
    body = ValidationErrorResponse(message="Invalid request payload.", fields=fields)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


@app.exception_handler(DuplicateError)
async def duplicate_error_handler(request: Request, exc: DuplicateError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"message": exc.message})


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": exc.message})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error("Store unavailable while handling %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": exc.message}
    )


@app.exception_handler(CatalogUnavailable)
async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailable):
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"message": exc.message})


@app.get("/")
def read_root():
    return {"message": "Recipe favorites backend is running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": os.getenv("DATABASE_NAME", database.DEFAULT_DATABASE_NAME),
        "connection_status": "Not Connected",
        "collections": [],
    }

    try:
        db = database.get_db()
    except StoreUnavailable:
        return response

    response["connection_status"] = "Connected"
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
    except Exception as e:
        logger.warning("Database diagnostics failed: %s", e)
        response["database"] = "⚠️  Connected but Error"

    return response


@app.get("/recipes/search", response_model=RecipeSearchResponse)
def search_recipes(q: str = Query(..., description="Recipe name or keyword")):
    term = q.strip()
    if not term:
        raise ValidationError(["q"], message="Please enter a recipe to search for.")
    meals = mealdb.search_by_keyword(term)
    return RecipeSearchResponse(count=len(meals), meals=meals)


@app.get("/recipes/{recipe_id}", response_model=RecipeDetailResponse)
def get_recipe(
    recipe_id: str,
    service_factory: Callable[[], FavoritesService] = Depends(get_favorites_service_factory),
):
    recipe = mealdb.lookup_by_id(recipe_id)
    if recipe is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": "Recipe not found in the catalog."},
        )
    try:
        is_favorite = service_factory().is_favorite(recipe_id)
    except StoreUnavailable:
        logger.warning("Favorites store unavailable; serving recipe %s without favorite flag", recipe_id)
        is_favorite = False
    return RecipeDetailResponse(**recipe.model_dump(), is_favorite=is_favorite)


@app.get("/favorites", response_model=List[FavoriteRecipe])
def list_favorites(service: FavoritesService = Depends(get_favorites_service)):
    return service.list_favorites()


@app.post("/favorites", response_model=FavoriteRecipe, status_code=status.HTTP_201_CREATED)
def add_favorite(
    payload: FavoriteRecipeIn,
    service: FavoritesService = Depends(get_favorites_service),
):
    return service.add_favorite(payload.recipe_id, payload.recipe_name, payload.image_url)


@app.delete("/favorites/{recipe_id}", response_model=MessageResponse)
def remove_favorite(recipe_id: str, service: FavoritesService = Depends(get_favorites_service)):
    service.remove_favorite(recipe_id)
    return MessageResponse(message="Recipe successfully removed from favorites.")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
