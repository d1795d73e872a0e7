import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from sqlalchemy.orm import Session

from . import models, schemas, services
from .config import get_settings
from .db import get_db, init_db
from .errors import ForbiddenError, RecipeBookError
from .logging_setup import setup_logging
from .security import get_current_user

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(get_settings().log_level)
    init_db()
    yield


app = FastAPI(title="Recipe Book", lifespan=lifespan)


@app.exception_handler(RecipeBookError)
async def recipe_book_error_handler(request: Request, exc: RecipeBookError):
    headers = {"WWW-Authenticate": "Basic"} if exc.status_code == 401 else None
    return PlainTextResponse(exc.message, status_code=exc.status_code, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body")
        problems.append(f"{field}: {error['msg']}")
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, problems)
    return PlainTextResponse("\n".join(problems), status_code=status.HTTP_400_BAD_REQUEST)


@app.post("/api/register", response_class=PlainTextResponse)
def register(registration: schemas.RegistrationRequest, db: Session = Depends(get_db)):
    services.register_user(db, registration.email, registration.password)
    return "New user successfully registered"


# declared before /api/recipe/{recipe_id} so "search" is not read as an id
@app.get("/api/recipe/search", response_model=List[schemas.RecipeDTO])
def search_recipe(
    category: Optional[str] = None,
    name: Optional[str] = None,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return services.search_recipes(db, category=category, name=name)


@app.get("/api/recipe/{recipe_id}", response_model=schemas.RecipeDTO)
def get_recipe(
    recipe_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return services.get_recipe(db, recipe_id)


@app.post("/api/recipe/new", status_code=status.HTTP_201_CREATED)
def post_recipe(
    recipe: schemas.RecipeCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    logger.info("User %s is creating a new recipe", user.username)
    recipe_id = services.save_recipe(db, user.username, recipe)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"Recipe created for id": recipe_id},
    )


@app.put("/api/recipe/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_recipe(
    recipe_id: int,
    recipe: schemas.RecipeUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    services.update_recipe(db, user.username, recipe_id, recipe)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.delete("/api/recipe/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(
    recipe_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    services.delete_recipe(db, user.username, recipe_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Anything not routed above is refused: anonymous callers get 401 from the
# credentials check, authenticated ones get 403.
@app.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    include_in_schema=False,
)
def deny_all(path: str, user: models.User = Depends(get_current_user)):
    logger.warning("Denied %s access to /%s", user.username, path)
    raise ForbiddenError("Access Denied")
