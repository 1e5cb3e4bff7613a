from dataclasses import replace
from typing import Any, Callable, List, Optional

from constants import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_HEAT_INTENSITY,
    DEFAULT_SCENT_DOSAGE_ML,
    EDITABLE_STEP_FIELDS,
    STEP_NAME_TEMPLATE,
)
from recipe_calculations import find_ingredient, total_cost, total_duration
from recipe_models import Ingredient, InfusionRecipe, InfusionStep

DraftListener = Callable[["RecipeDraft"], None]


class RecipeDraft:
    """In-memory recipe being composed, plus the ingredients it can pick from.

    Name, theme and description are plain attributes the binding writes
    directly. Step mutations go through the methods below so step orders stay
    contiguous and listeners hear about every change. Totals are recomputed
    from the current state on each read.
    """

    def __init__(self, ingredients: Optional[List[Ingredient]] = None):
        self.name = ""
        self.theme = ""
        self.description = ""
        self.steps: List[InfusionStep] = []
        self.ingredients: List[Ingredient] = list(ingredients or [])
        self._listeners: List[DraftListener] = []

    def subscribe(self, callback: DraftListener) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: DraftListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _changed(self) -> None:
        for callback in list(self._listeners):
            callback(self)

    @property
    def total_duration(self) -> int:
        return total_duration(self.steps)

    @property
    def total_cost(self) -> float:
        return total_cost(self.steps, self.ingredients)

    def set_ingredients(self, ingredients: List[Ingredient]) -> None:
        self.ingredients = list(ingredients)
        self._changed()

    def step_at(self, step_order: int) -> Optional[InfusionStep]:
        return next((s for s in self.steps if s.step_order == step_order), None)

    def add_step(self) -> InfusionStep:
        count = len(self.steps)
        step = InfusionStep(
            name=STEP_NAME_TEMPLATE.format(number=count + 1),
            duration_seconds=DEFAULT_DURATION_SECONDS,
            heat_intensity=DEFAULT_HEAT_INTENSITY,
            scent_dosage_ml=DEFAULT_SCENT_DOSAGE_ML,
            step_order=count
        )
        self.steps.append(step)
        self._changed()
        return step

    def remove_step(self, step_order: int) -> Optional[InfusionStep]:
        removed = self.step_at(step_order)
        if removed is None:
            return None
        self.steps = [s for s in self.steps if s is not removed]
        for index, step in enumerate(self.steps):
            step.step_order = index
        self._changed()
        return removed

    def update_step(self, step_order: int, **patch: Any) -> Optional[InfusionStep]:
        unknown = set(patch) - EDITABLE_STEP_FIELDS
        if unknown:
            raise ValueError(f"Cannot edit step field(s): {', '.join(sorted(unknown))}")

        step = self.step_at(step_order)
        if step is None:
            return None
        for key, value in patch.items():
            setattr(step, key, value)
        if "ingredient_id" in patch:
            ingredient = find_ingredient(self.ingredients, step.ingredient_id)
            step.ingredient_name = ingredient.name if ingredient else None
        # any edit may feed the totals
        self._changed()
        return step

    def reset(self) -> None:
        self.name = ""
        self.theme = ""
        self.description = ""
        self.steps = []
        self._changed()

    def is_valid(self) -> bool:
        return bool(self.name.strip()) and len(self.steps) > 0

    def to_recipe(self) -> InfusionRecipe:
        return InfusionRecipe(
            name=self.name,
            theme=self.theme or None,
            description=self.description or None,
            steps=[replace(step) for step in self.steps]
        )
