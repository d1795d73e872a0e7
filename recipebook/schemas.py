import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = re.compile(
    r"^(?=.{1,64}@)[A-Za-z0-9+_-]+(\.[A-Za-z0-9+_-]+)*@"
    r"[^-][A-Za-z0-9+-]+(\.[A-Za-z0-9+-]+)*(\.[A-Za-z]{2,})$"
)


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


class RecipeBase(BaseModel):
    name: str = Field(..., json_schema_extra={"example": "Simple Pancakes"})
    description: str = Field(
        ..., json_schema_extra={"example": "Fluffy pancakes for a slow morning"}
    )
    category: str = Field(..., json_schema_extra={"example": "breakfast"})
    ingredients: List[str] = Field(
        ...,
        min_length=1,
        json_schema_extra={"example": ["flour", "milk", "egg"]},
    )
    directions: List[str] = Field(
        ...,
        min_length=1,
        json_schema_extra={
            "example": [
                "Mix dry ingredients",
                "Add wet ingredients",
                "Cook on skillet until golden",
            ]
        },
    )


class RecipeCreate(RecipeBase):
    """Body of ``POST /api/recipe/new``. Unknown keys such as id or date are dropped."""

    model_config = ConfigDict(extra="ignore")

    @field_validator("name", "description", "category")
    @classmethod
    def text_not_blank(cls, value):
        return _not_blank(value)

    @field_validator("ingredients", "directions")
    @classmethod
    def entries_not_blank(cls, values):
        for value in values:
            _not_blank(value)
        return values


class RecipeUpdate(BaseModel):
    """Body of ``PUT /api/recipe/{id}``.

    Every field is optional: a missing or null field leaves the stored value
    alone. Unknown keys, including an ``id``, are dropped; the path id wins.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    ingredients: Optional[List[str]] = None
    directions: Optional[List[str]] = None


class RecipeDTO(BaseModel):
    name: str
    description: str
    category: str
    date: str
    ingredients: List[str]
    directions: List[str]


class RegistrationRequest(BaseModel):
    email: str = Field(..., json_schema_extra={"example": "cook@example.com"})
    password: str = Field(..., min_length=8)

    @field_validator("email")
    @classmethod
    def email_shaped(cls, value):
        if not EMAIL_PATTERN.match(value):
            raise ValueError("must be a well-formed email address")
        return value

    @field_validator("password")
    @classmethod
    def password_not_blank(cls, value):
        return _not_blank(value)
