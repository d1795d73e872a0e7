from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from . import models

# Loads both list columns with one extra SELECT each, however many recipes
# the main query returns.
_WITH_LISTS = (
    selectinload(models.Recipe.ingredient_rows),
    selectinload(models.Recipe.direction_rows),
)


def get_user(db: Session, username: str):
    return db.query(models.User).filter(models.User.username == username).first()


def user_exists(db: Session, username: str) -> bool:
    return db.query(
        db.query(models.User).filter(models.User.username == username).exists()
    ).scalar()


def create_user(db: Session, username: str, password_hash: str, authority: str = "ROLE_USER"):
    db_user = models.User(username=username, password=password_hash, authority=authority)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def get_recipe(db: Session, recipe_id: int):
    return db.query(models.Recipe).filter(models.Recipe.id == recipe_id).first()


def get_recipe_eager(db: Session, recipe_id: int):
    """Fetch a recipe with its ingredients and directions already loaded."""
    return (
        db.query(models.Recipe)
        .options(*_WITH_LISTS)
        .filter(models.Recipe.id == recipe_id)
        .first()
    )


def _newest_first(query):
    return query.options(*_WITH_LISTS).order_by(
        models.Recipe.date.desc(), models.Recipe.id.desc()
    )


def search_by_category(db: Session, category: str):
    query = db.query(models.Recipe).filter(
        func.lower(models.Recipe.category) == category.lower()
    )
    return _newest_first(query).all()


def search_by_name(db: Session, name_part: str):
    # ilike would treat % and _ in the user's term as wildcards
    query = db.query(models.Recipe).filter(
        func.lower(models.Recipe.name).contains(name_part.lower(), autoescape=True)
    )
    return _newest_first(query).all()


def create_recipe(db: Session, owner: models.User, **fields):
    db_recipe = models.Recipe(
        name=fields["name"],
        description=fields["description"],
        category=fields["category"],
        ingredients=list(fields["ingredients"]),
        directions=list(fields["directions"]),
        owner=owner,
    )
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def save_recipe(db: Session, db_recipe: models.Recipe):
    """Persist changes made to an existing recipe and refresh its date."""
    db_recipe.touch()
    db.add(db_recipe)
    db.commit()
    db.refresh(db_recipe)
    return db_recipe


def delete_recipe(db: Session, db_recipe: models.Recipe):
    db.delete(db_recipe)
    db.commit()
