import argparse
import logging

from pydantic import ValidationError

from recipebook import crud, models, schemas, services
from recipebook.config import get_settings
from recipebook.db import SessionLocal, init_db
from recipebook.logging_setup import setup_logging
from recipebook.recipes import load_recipes

logger = logging.getLogger("import_data")


def main():
    parser = argparse.ArgumentParser(description="Seed the recipe book from a JSON file.")
    parser.add_argument("owner", help="email of the user who will own the imported recipes")
    parser.add_argument("password", help="password used if the owner has to be registered")
    parser.add_argument("--file", default=None, help="seed file (defaults to the configured one)")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.log_level)
    init_db()

    path = args.file or settings.seed_file
    data = load_recipes(path)
    if not data:
        logger.warning("%s not found or empty", path)
        return

    db = SessionLocal()
    try:
        owner = crud.get_user(db, args.owner)
        if owner is None:
            owner = services.register_user(db, args.owner, args.password)

        added = 0
        for raw in data:
            try:
                recipe = schemas.RecipeCreate.model_validate(raw)
            except ValidationError as e:
                name = raw.get("name") if isinstance(raw, dict) else raw
                logger.warning("Skipping invalid recipe %r: %s", name, e)
                continue
            exists = (
                db.query(models.Recipe)
                .filter(models.Recipe.owner_username == owner.username)
                .filter(models.Recipe.name == recipe.name)
                .first()
            )
            if exists:
                continue
            crud.create_recipe(db, owner, **recipe.model_dump())
            added += 1
    finally:
        db.close()
    logger.info("Imported %d recipes for %s", added, args.owner)


if __name__ == "__main__":
    main()
