from .user import User
from .cuisine import Cuisine
from .ingredient import Ingredient
from .recipe import Recipe, RecipeCuisine, RecipeIngredient, RecipeStep
