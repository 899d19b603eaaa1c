from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20

SortKey = Literal["name", "created_at", "updated_at", "author"]
SortOrder = Literal["asc", "desc"]


class IngredientInput(BaseModel):
    name: str = Field(..., min_length=1, json_schema_extra={"example": "Pasta"})
    quantity: float = Field(..., ge=0, json_schema_extra={"example": 400})
    unit: str = Field(..., min_length=1, json_schema_extra={"example": "grams"})


class StepInput(BaseModel):
    step_number: int = Field(..., ge=1)
    instruction: str = Field(..., min_length=1)


class RecipeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, json_schema_extra={"example": "Carbonara"})
    description: str = Field(..., max_length=1000)
    cuisines: list[str] = Field(default_factory=list, description="Cuisine ids")
    ingredients: list[IngredientInput] = Field(default_factory=list)
    steps: list[StepInput] = Field(default_factory=list)


class RecipeUpdate(BaseModel):
    """Partial update; every supplied collection replaces the stored one.

    An empty ``description`` counts as not supplied.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    cuisines: Optional[list[str]] = None
    ingredients: Optional[list[IngredientInput]] = None
    steps: Optional[list[StepInput]] = None


class RecipeFilter(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort_by: SortKey = "created_at"
    sort_order: SortOrder = "desc"
    cuisines: list[str] = Field(default_factory=list)
    author_id: Optional[str] = None
    search: Optional[str] = None


class CuisineCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, json_schema_extra={"example": "Italian"})
    description: Optional[str] = Field(None, max_length=500)


class CuisineUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)


class CuisineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class StepOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    step_number: int
    instruction: str


class RecipeIngredientOut(BaseModel):
    id: str
    ingredient_id: str
    ingredient_name: str
    quantity: float
    unit: str


class RecipeRow(BaseModel):
    id: str
    name: str
    description: str
    author_id: str
    author_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str
    cuisine_names: list[str] = Field(default_factory=list)


class RecipeAggregate(BaseModel):
    id: str
    name: str
    description: str
    author_id: str
    author_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    created_by: str
    updated_by: str
    cuisines: list[CuisineOut] = Field(default_factory=list)
    steps: list[StepOut] = Field(default_factory=list)
    ingredients: list[RecipeIngredientOut] = Field(default_factory=list)


class RecipePage(BaseModel):
    recipes: list[RecipeRow]
    total: int


class GroupedRecipeItem(BaseModel):
    id: str
    name: str
    description: str


class CuisineGroup(BaseModel):
    cuisine_id: str
    cuisine_name: str
    recipe_count: int
    recipes: list[GroupedRecipeItem]


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refreshToken: str


class ChangePasswordRequest(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=8, max_length=128)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)


class UserProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class FileUploadInfo(BaseModel):
    recipe_id: str
    type: Literal["hero", "step"]
    step_number: Optional[int] = None
    filename: str
    path: str
