"""Pydantic models for API request bodies."""

from datetime import date

from pydantic import BaseModel, Field

from recipe_costing.domain.menus import DailyOptions, DayMenu, Menu
from recipe_costing.domain.recipes import RecipeLineInput


class RecipeLine(BaseModel):
    """Ingredient line requested for a recipe."""

    product_code: str | None = None
    quantity: float | str | None = None
    unit: str | None = None
    notes: str | None = None

    def to_input(self) -> RecipeLineInput:
        return RecipeLineInput(
            product_code=self.product_code,
            quantity=self.quantity,
            unit=self.unit,
            notes=self.notes,
        )


class RecipeCreate(BaseModel):
    """Payload for creating a recipe."""

    name: str
    code: str | None = None
    description: str | None = None
    servings: int = 1
    prep_time: int | None = None
    cook_time: int | None = None
    instructions: str | None = None
    notes: str | None = None
    photo: str | None = None
    ingredients: list[RecipeLine] = Field(default_factory=list)


class RecipeUpdate(BaseModel):
    """Partial update of recipe fields."""

    name: str | None = None
    code: str | None = None
    description: str | None = None
    servings: int | None = None
    prep_time: int | None = None
    cook_time: int | None = None
    instructions: str | None = None
    notes: str | None = None
    photo: str | None = None


class RecipeIngredients(BaseModel):
    """Full replacement list of recipe lines."""

    ingredients: list[RecipeLine]


class DayMenuPayload(BaseModel):
    """Recipe ids for one weekday."""

    lunch_option_1: int | None = None
    lunch_option_2: int | None = None
    lunch_option_3: int | None = None
    served_with: int | None = None
    dessert: int | None = None


class DailyOptionsPayload(BaseModel):
    """Recipe ids offered every day."""

    option_1: int | None = None
    option_2: int | None = None
    option_3: int | None = None
    option_4: int | None = None


class MenuPayload(BaseModel):
    """Weekly menu payload."""

    name: str
    week_start_date: date
    monday: DayMenuPayload | None = None
    tuesday: DayMenuPayload | None = None
    wednesday: DayMenuPayload | None = None
    thursday: DayMenuPayload | None = None
    friday: DayMenuPayload | None = None
    daily_options: DailyOptionsPayload | None = None

    def to_menu(self) -> Menu:
        days = {
            day: DayMenu(**payload.model_dump()) if payload else None
            for day, payload in (
                ("monday", self.monday),
                ("tuesday", self.tuesday),
                ("wednesday", self.wednesday),
                ("thursday", self.thursday),
                ("friday", self.friday),
            )
        }
        return Menu(
            name=self.name,
            week_start_date=self.week_start_date,
            daily_options=(
                DailyOptions(**self.daily_options.model_dump())
                if self.daily_options
                else None
            ),
            **days,
        )
