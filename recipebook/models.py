from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .db import Base


def _now():
    return datetime.now()


class User(Base):
    __tablename__ = "users"
    username = Column(String(254), primary_key=True)
    password = Column(String(100), nullable=False)  # bcrypt hash
    authority = Column(String(50), nullable=False, default="ROLE_USER")

    recipes = relationship("Recipe", back_populates="owner")

    def __repr__(self):
        return f"<User {self.username}>"


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"
    id = Column(Integer, primary_key=True)
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False)
    value = Column(Text, nullable=False)


class RecipeDirection(Base):
    __tablename__ = "recipe_directions"
    id = Column(Integer, primary_key=True)
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False)
    value = Column(Text, nullable=False)


class Recipe(Base):
    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    date = Column(DateTime, nullable=False, default=_now)
    owner_username = Column(
        String(254), ForeignKey("users.username"), nullable=False, index=True
    )

    owner = relationship("User", back_populates="recipes")
    ingredient_rows = relationship(
        "RecipeIngredient",
        order_by="RecipeIngredient.position",
        cascade="all, delete-orphan",
    )
    direction_rows = relationship(
        "RecipeDirection",
        order_by="RecipeDirection.position",
        cascade="all, delete-orphan",
    )

    # The list columns are exposed as plain lists of strings; assigning a new
    # list replaces every child row.
    @property
    def ingredients(self):
        return [row.value for row in self.ingredient_rows]

    @ingredients.setter
    def ingredients(self, values):
        self.ingredient_rows = [
            RecipeIngredient(position=i, value=v) for i, v in enumerate(values)
        ]

    @property
    def directions(self):
        return [row.value for row in self.direction_rows]

    @directions.setter
    def directions(self, values):
        self.direction_rows = [
            RecipeDirection(position=i, value=v) for i, v in enumerate(values)
        ]

    def touch(self):
        self.date = _now()

    def __repr__(self):
        return f"<Recipe {self.id} {self.name!r}>"
