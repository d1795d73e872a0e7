from . import models, schemas

MERGEABLE_FIELDS = ("name", "description", "category", "ingredients", "directions")


def to_dto(recipe: models.Recipe) -> schemas.RecipeDTO:
    return schemas.RecipeDTO(
        name=recipe.name,
        description=recipe.description,
        category=recipe.category,
        date=recipe.date.isoformat() if recipe.date else "",
        ingredients=recipe.ingredients,
        directions=recipe.directions,
    )


def merge_into(update: schemas.RecipeUpdate, recipe: models.Recipe) -> models.Recipe:
    """Copy every non-null field of ``update`` onto ``recipe``.

    Null or missing fields keep the stored value. The recipe id and owner are
    never touched.
    """
    for field in MERGEABLE_FIELDS:
        value = getattr(update, field)
        if value is not None:
            setattr(recipe, field, value)
    return recipe
