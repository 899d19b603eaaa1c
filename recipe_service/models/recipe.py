from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recipe_service.db.base import Base, new_id, utcnow

if TYPE_CHECKING:
    from recipe_service.models.cuisine import Cuisine
    from recipe_service.models.ingredient import Ingredient
    from recipe_service.models.user import User


class Recipe(Base):
    __tablename__ = "recipes"
    __table_args__ = (
        Index("idx_recipes_author", "author_id"),
        Index("idx_recipes_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text(), nullable=False)
    author_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    created_by: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    updated_by: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)

    author: Mapped["User"] = relationship("User", foreign_keys=[author_id])
    steps: Mapped[list["RecipeStep"]] = relationship(
        "RecipeStep",
        back_populates="recipe",
        passive_deletes=True,
        order_by="RecipeStep.step_number",
    )
    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        passive_deletes=True,
    )
    cuisines: Mapped[list["Cuisine"]] = relationship(
        "Cuisine",
        secondary="recipe_cuisines",
        viewonly=True,
        order_by="Cuisine.name",
    )


class RecipeCuisine(Base):
    __tablename__ = "recipe_cuisines"
    __table_args__ = (
        UniqueConstraint("recipe_id", "cuisine_id", name="uq_recipe_cuisines_recipe_cuisine"),
        Index("idx_recipe_cuisines_recipe", "recipe_id"),
        Index("idx_recipe_cuisines_cuisine", "cuisine_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    recipe_id: Mapped[str] = mapped_column(ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    cuisine_id: Mapped[str] = mapped_column(ForeignKey("cuisines.id"), nullable=False)


class RecipeStep(Base):
    __tablename__ = "recipe_steps"
    __table_args__ = (
        UniqueConstraint("recipe_id", "step_number", name="uq_recipe_steps_recipe_step_number"),
        Index("idx_recipe_steps_recipe", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    recipe_id: Mapped[str] = mapped_column(ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    instruction: Mapped[str] = mapped_column(Text(), nullable=False)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="steps")


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"
    __table_args__ = (
        UniqueConstraint("recipe_id", "ingredient_id", name="uq_recipe_ingredients_recipe_ingredient"),
        Index("idx_recipe_ingredients_recipe", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    recipe_id: Mapped[str] = mapped_column(ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    ingredient_id: Mapped[str] = mapped_column(ForeignKey("ingredients.id"), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    unit: Mapped[str] = mapped_column(String(32), nullable=False, default="")

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")
    ingredient: Mapped["Ingredient"] = relationship("Ingredient")
