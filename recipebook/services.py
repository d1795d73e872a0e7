"""Business rules for recipes and user registration.

Every function takes the request's session explicitly and raises the errors
from ``recipebook.errors`` when a request cannot be served.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import crud, mapper, models, schemas
from .errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from .security import hash_password

logger = logging.getLogger(__name__)


def register_user(db: Session, email: str, password: str) -> models.User:
    if crud.user_exists(db, email):
        logger.error("User with email %s already exists", email)
        raise ConflictError("User already exists")

    logger.info("Registering new user: %s", email)
    try:
        return crud.create_user(db, email, hash_password(password), authority="ROLE_USER")
    except IntegrityError:
        # a concurrent registration inserted the same username first
        db.rollback()
        logger.error("User with email %s already exists", email)
        raise ConflictError("User already exists")


def get_recipe(db: Session, recipe_id: int) -> schemas.RecipeDTO:
    logger.debug("Searching for recipe with ID: %s", recipe_id)
    recipe = crud.get_recipe_eager(db, recipe_id)
    if recipe is None:
        logger.debug("Recipe not found for ID: %s", recipe_id)
        raise NotFoundError(f"Recipe not found for ID: {recipe_id}")
    logger.info("Recipe found for ID: %s", recipe_id)
    return mapper.to_dto(recipe)


def save_recipe(db: Session, current_username: str, recipe_in: schemas.RecipeCreate) -> int:
    owner = crud.get_user(db, current_username)
    if owner is None:
        # the caller authenticated a moment ago, so their row was removed mid-request
        logger.error("User not found for username: %s", current_username)
        raise NotFoundError(f"User not found for username: {current_username}")

    recipe = crud.create_recipe(db, owner, **recipe_in.model_dump())
    logger.info("User %s created recipe %s", current_username, recipe.id)
    return recipe.id


def _reject_blank_fields(recipe_in: schemas.RecipeUpdate) -> None:
    problems = []
    for field in ("name", "description", "category"):
        value = getattr(recipe_in, field)
        if value is not None and not value.strip():
            problems.append(f"{field}: must not be blank")
    for field in ("ingredients", "directions"):
        values = getattr(recipe_in, field)
        if values is None:
            continue
        if not values:
            problems.append(f"{field}: at least one entry is required")
        elif any(not v.strip() for v in values):
            problems.append(f"{field}: entries must not be blank")
    if problems:
        raise ValidationError("\n".join(problems))


def _get_existing(db: Session, recipe_id: int) -> models.Recipe:
    recipe = crud.get_recipe_eager(db, recipe_id)
    if recipe is None:
        logger.debug("Recipe not found for ID: %s", recipe_id)
        raise NotFoundError(f"Recipe not found for ID: {recipe_id}")
    return recipe


def update_recipe(
    db: Session, current_username: str, recipe_id: int, recipe_in: schemas.RecipeUpdate
) -> None:
    recipe = _get_existing(db, recipe_id)
    if recipe.owner_username != current_username:
        logger.warning(
            "User %s tried to update recipe %s owned by someone else", current_username, recipe_id
        )
        raise UnauthorizedError(
            f"User {current_username} is not authorized to update recipe {recipe_id}"
        )

    _reject_blank_fields(recipe_in)
    mapper.merge_into(recipe_in, recipe)
    crud.save_recipe(db, recipe)
    logger.info("Recipe with ID %s updated by %s", recipe_id, current_username)


def delete_recipe(db: Session, current_username: str, recipe_id: int) -> None:
    recipe = _get_existing(db, recipe_id)
    if recipe.owner_username != current_username:
        logger.warning(
            "User %s tried to delete recipe %s owned by someone else", current_username, recipe_id
        )
        raise ForbiddenError(
            f"User {current_username} is not allowed to delete recipe {recipe_id}"
        )

    crud.delete_recipe(db, recipe)
    logger.info("Recipe with ID %s deleted.", recipe_id)


def _found_or_raise(term: str, recipes: List[models.Recipe]) -> List[schemas.RecipeDTO]:
    if not recipes:
        logger.debug("No recipes found for %s: %s", term, term)
        raise NotFoundError(f"No recipes found for {term}: {term}")
    logger.info("%d recipe(s) found for %s", len(recipes), term)
    return [mapper.to_dto(r) for r in recipes]


def search_recipe_by_category(db: Session, category: str) -> List[schemas.RecipeDTO]:
    logger.debug("Searching for recipes with category: %s", category)
    return _found_or_raise(category, crud.search_by_category(db, category))


def search_recipe_by_name(db: Session, name: str) -> List[schemas.RecipeDTO]:
    logger.debug("Searching for recipes with name: %s", name)
    return _found_or_raise(name, crud.search_by_name(db, name))


def search_recipes(
    db: Session, category: Optional[str] = None, name: Optional[str] = None
) -> List[schemas.RecipeDTO]:
    if category is not None and name is not None:
        logger.error("Both category and name parameters were provided.")
        raise ValidationError("Provide either category or name, not both")
    if category is not None:
        return search_recipe_by_category(db, category)
    if name is not None:
        return search_recipe_by_name(db, name)
    logger.error("Neither category nor name parameters were provided.")
    raise ValidationError("Provide either category or name")
