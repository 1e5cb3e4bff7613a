from typing import Iterable, Optional

from recipe_models import Ingredient, InfusionStep


def total_duration(steps: Iterable[InfusionStep]) -> int:
    return sum(step.duration_seconds or 0 for step in steps)


def find_ingredient(ingredients: Iterable[Ingredient], ingredient_id: Optional[int]) -> Optional[Ingredient]:
    if ingredient_id is None:
        return None
    return next((i for i in ingredients if i.id == ingredient_id), None)


def total_cost(steps: Iterable[InfusionStep], ingredients: Iterable[Ingredient]) -> float:
    """Sum cost per ml times dosage for steps with a known ingredient.

    Steps without an ingredient, with no dosage, or pointing at an ingredient
    that is not loaded contribute nothing.
    """
    catalog = list(ingredients)
    cost = 0.0
    for step in steps:
        if not (step.ingredient_id and step.scent_dosage_ml):
            continue
        ingredient = find_ingredient(catalog, step.ingredient_id)
        if ingredient:
            cost += ingredient.cost_per_ml * step.scent_dosage_ml
    return cost


def format_duration(seconds: int) -> str:
    sign = "-" if seconds < 0 else ""
    minutes, secs = divmod(abs(int(seconds)), 60)
    return f"{sign}{minutes}:{secs:02d}"


def format_cost(amount: float) -> str:
    return f"${amount:.2f}"
