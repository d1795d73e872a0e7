import pytest

from conftest import OTHER, OWNER, recipe_payload

from recipebook import crud, schemas, services
from recipebook.errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError, ValidationError


def _save(db, username=OWNER[0], **overrides):
    return services.save_recipe(db, username, schemas.RecipeCreate(**recipe_payload(**overrides)))


def test_register_twice_keeps_original_hash(db):
    services.register_user(db, "cook@example.com", "first-password")
    original = crud.get_user(db, "cook@example.com").password

    with pytest.raises(ConflictError, match="User already exists"):
        services.register_user(db, "cook@example.com", "second-password")

    db.expire_all()
    assert crud.get_user(db, "cook@example.com").password == original


def test_save_then_get_returns_input(db, owner):
    rid = _save(db)
    dto = services.get_recipe(db, rid)

    expected = recipe_payload()
    assert dto.name == expected["name"]
    assert dto.description == expected["description"]
    assert dto.category == expected["category"]
    assert dto.ingredients == expected["ingredients"]
    assert dto.directions == expected["directions"]
    assert dto.date
    assert not hasattr(dto, "owner_username")

    assert crud.get_recipe(db, rid).owner_username == OWNER[0]


def test_save_for_vanished_user(db):
    with pytest.raises(NotFoundError):
        _save(db, username="nobody@example.com")


def test_get_missing_recipe(db):
    with pytest.raises(NotFoundError, match="Recipe not found for ID: 7"):
        services.get_recipe(db, 7)


def test_update_merges_supplied_fields_only(db, owner):
    rid = _save(db)
    services.update_recipe(
        db, OWNER[0], rid, schemas.RecipeUpdate(id=500, description="Now with lemon", directions=["Just steep"])
    )

    dto = services.get_recipe(db, rid)
    assert dto.description == "Now with lemon"
    assert dto.directions == ["Just steep"]
    assert dto.name == recipe_payload()["name"]
    assert dto.category == recipe_payload()["category"]
    assert dto.ingredients == recipe_payload()["ingredients"]
    assert crud.get_recipe(db, 500) is None


def test_update_by_non_owner(db, other):
    rid = _save(db)
    with pytest.raises(UnauthorizedError):
        services.update_recipe(db, OTHER[0], rid, schemas.RecipeUpdate(name="mine now"))
    assert services.get_recipe(db, rid).name == recipe_payload()["name"]


def test_update_missing_recipe(db, owner):
    with pytest.raises(NotFoundError):
        services.update_recipe(db, OWNER[0], 3, schemas.RecipeUpdate(name="x"))


def test_delete_by_non_owner_keeps_recipe(db, other):
    rid = _save(db)
    with pytest.raises(ForbiddenError):
        services.delete_recipe(db, OTHER[0], rid)
    assert crud.get_recipe(db, rid) is not None


def test_delete_by_owner(db, owner):
    rid = _save(db)
    services.delete_recipe(db, OWNER[0], rid)
    assert crud.get_recipe(db, rid) is None

    with pytest.raises(NotFoundError):
        services.delete_recipe(db, OWNER[0], rid)


def test_search_by_category_is_case_insensitive_and_newest_first(db, owner):
    _save(db, name="one", category="cat1")
    _save(db, name="two", category="cat1")
    _save(db, name="three", category="cat2")

    found = services.search_recipe_by_category(db, "CAT1")
    assert [r.name for r in found] == ["two", "one"]

    with pytest.raises(NotFoundError, match="No recipes found for catX: catX"):
        services.search_recipe_by_category(db, "catX")


def test_category_search_is_exact(db, owner):
    _save(db, category="cat10")
    with pytest.raises(NotFoundError):
        services.search_recipe_by_category(db, "cat1")


def test_search_dispatch(db, owner):
    _save(db, name="Mint Tea", category="beverage")

    assert len(services.search_recipes(db, category="Beverage")) == 1
    assert len(services.search_recipes(db, name="mint")) == 1

    with pytest.raises(ValidationError):
        services.search_recipes(db, category="beverage", name="mint")
    with pytest.raises(ValidationError):
        services.search_recipes(db)


def test_update_by_owner_rejects_blank_values(db, owner):
    rid = _save(db)

    with pytest.raises(ValidationError, match="name: must not be blank"):
        services.update_recipe(db, OWNER[0], rid, schemas.RecipeUpdate(name="  "))
    with pytest.raises(ValidationError, match="ingredients: at least one entry is required"):
        services.update_recipe(db, OWNER[0], rid, schemas.RecipeUpdate(ingredients=[]))
    with pytest.raises(ValidationError, match="directions: entries must not be blank"):
        services.update_recipe(db, OWNER[0], rid, schemas.RecipeUpdate(directions=["Boil", ""]))

    db.expire_all()
    dto = services.get_recipe(db, rid)
    assert dto.name == recipe_payload()["name"]
    assert dto.ingredients == recipe_payload()["ingredients"]
    assert dto.directions == recipe_payload()["directions"]


def test_update_ownership_checked_before_content(db, other):
    rid = _save(db)
    with pytest.raises(UnauthorizedError):
        services.update_recipe(db, OTHER[0], rid, schemas.RecipeUpdate(name="  ", ingredients=[]))


def test_register_conflict_when_insert_loses_race(db, monkeypatch):
    services.register_user(db, "cook@example.com", "first-password")
    original = crud.get_user(db, "cook@example.com").password
    db.expunge_all()

    # the existence check passes, as it would for a concurrent request
    monkeypatch.setattr(crud, "user_exists", lambda db, username: False)
    with pytest.raises(ConflictError, match="User already exists"):
        services.register_user(db, "cook@example.com", "second-password")

    db.expire_all()
    assert crud.get_user(db, "cook@example.com").password == original


def test_search_folds_non_ascii_case(db, owner):
    _save(db, name="Ölkuchen", category="Äpfel")

    assert [r.name for r in services.search_recipe_by_category(db, "äpfel")] == ["Ölkuchen"]
    assert [r.name for r in services.search_recipe_by_name(db, "ölk")] == ["Ölkuchen"]
    assert [r.name for r in services.search_recipe_by_name(db, "KUCHEN")] == ["Ölkuchen"]
