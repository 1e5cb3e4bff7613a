import logging
import shlex
from typing import Callable, Iterable, List, Optional

from constants import (
    EMPTY_STEPS_MESSAGE,
    INT_STEP_FIELDS,
    SAVE_FAILED_MESSAGE,
    SESSION_STEP_FIELDS,
)
from recipe_calculations import find_ingredient, format_cost, format_duration
from recipe_draft import RecipeDraft
from recipe_models import InfusionRecipe, InfusionStep
from thermaflow_client import GATEWAY_ERRORS, create_recipe, list_ingredients

logger = logging.getLogger(__name__)


class RecipeBuilder:
    """Binds a RecipeDraft to the backend and renders it as text."""

    def __init__(self, draft: RecipeDraft, base_url: str, notify: Callable[[str], None] = print):
        self.draft = draft
        self.base_url = base_url
        self.notify = notify

    @property
    def save_enabled(self) -> bool:
        return self.draft.is_valid()

    def load_ingredients(self) -> None:
        try:
            ingredients = list_ingredients(self.base_url)
        except GATEWAY_ERRORS:
            logger.exception("Error loading ingredients")
            return
        self.draft.set_ingredients(ingredients)

    def save(self) -> Optional[InfusionRecipe]:
        if not self.save_enabled:
            return None
        try:
            saved = create_recipe(self.base_url, self.draft.to_recipe())
        except GATEWAY_ERRORS:
            logger.exception("Error saving recipe")
            self.notify(SAVE_FAILED_MESSAGE)
            return None
        logger.info("Recipe saved with id %s", saved.id)
        # server totals win; fall back to the local ones if it omits them
        duration = saved.total_duration if saved.total_duration is not None else self.draft.total_duration
        cost = saved.total_cost if saved.total_cost is not None else self.draft.total_cost
        self.notify(
            f'Recipe "{saved.name}" saved successfully! '
            f"Total Duration: {duration}s "
            f"Total Cost: {format_cost(cost)}"
        )
        self.draft.reset()
        return saved

    def _ingredient_label(self, step: InfusionStep) -> str:
        ingredient = find_ingredient(self.draft.ingredients, step.ingredient_id)
        if ingredient:
            return f"{ingredient.name} ({ingredient.scent_profile.value})"
        if step.ingredient_id:
            return f"ingredient #{step.ingredient_id}"
        return "no ingredient"

    def _step_line(self, step: InfusionStep) -> str:
        parts = [
            f"{step.step_order}. {step.name}",
            f"{step.duration_seconds}s",
            f"heat {step.heat_intensity}",
            f"{step.scent_dosage_ml} ml",
            self._ingredient_label(step),
        ]
        if step.music_track_id:
            parts.append(f"track {step.music_track_id}")
        if step.lighting_scene:
            parts.append(f"scene {step.lighting_scene}")
        return " | ".join(parts)

    def summary_line(self) -> str:
        draft = self.draft
        state = "enabled" if self.save_enabled else "disabled"
        return (
            f"Duration {format_duration(draft.total_duration)} | "
            f"Cost {format_cost(draft.total_cost)} | "
            f"Steps {len(draft.steps)} | Save {state}"
        )

    def render(self) -> str:
        draft = self.draft
        lines = [
            f"# {draft.name or '(untitled)'}",
            f"Theme: {draft.theme or '-'}",
            f"Description: {draft.description or '-'}",
            "",
            "## Steps",
        ]
        if draft.steps:
            for step in sorted(draft.steps, key=lambda s: s.step_order):
                lines.append(self._step_line(step))
        else:
            lines.append(EMPTY_STEPS_MESSAGE)
        lines.extend([
            "",
            "## Summary",
            f"Total Duration: {draft.total_duration} seconds ({format_duration(draft.total_duration)})",
            f"Total Cost: {format_cost(draft.total_cost)}",
            f"Number of Steps: {len(draft.steps)}",
            f"Save: {'enabled' if self.save_enabled else 'disabled'}",
        ])
        return "\n".join(lines) + "\n"

    def render_ingredients(self) -> str:
        if not self.draft.ingredients:
            return "No ingredients available.\n"
        lines = [
            f"{i.id}. {i.name} ({i.scent_profile.value}) - {format_cost(i.cost_per_ml)}/ml"
            for i in self.draft.ingredients
        ]
        return "\n".join(lines) + "\n"


HELP_TEXT = """Commands:
  name|theme|description <text>   edit recipe fields
  add                             append a step
  remove <order>                  remove a step
  set <order> <field> <value>     fields: name, duration, heat, dosage, ingredient, track, scene ("-" clears)
  ingredients                     list selectable ingredients
  show                            print the recipe
  save                            submit the recipe
  reset                           clear the form
  quit                            leave the builder"""


class BuilderSession:
    """Line-oriented form: routes typed commands into the builder's draft."""

    def __init__(self, builder: RecipeBuilder, output: Callable[[str], None] = print):
        self.builder = builder
        self.output = output
        builder.draft.subscribe(self._on_change)

    def _on_change(self, draft: RecipeDraft) -> None:
        self.output(self.builder.summary_line())

    def close(self) -> None:
        self.builder.draft.unsubscribe(self._on_change)

    def run(self, lines: Iterable[str]) -> None:
        for line in lines:
            if not self.handle(line):
                break
        self.close()

    def handle(self, line: str) -> bool:
        command, _, rest = line.strip().partition(" ")
        command = command.lower()
        if not command:
            return True
        if command in ("quit", "exit"):
            return False
        try:
            self._dispatch(command, rest.strip())
        except ValueError as err:
            self.output(f"Error: {err}")
        return True

    def _dispatch(self, command: str, rest: str) -> None:
        draft = self.builder.draft
        if command in ("name", "theme", "description"):
            setattr(draft, command, rest)
            self.output(self.builder.summary_line())
        elif command == "add":
            draft.add_step()
        elif command == "remove":
            order = _parse_int(rest, "step order")
            if draft.remove_step(order) is None:
                self.output(f"No step with order {order}.")
        elif command == "set":
            self._set(shlex.split(rest))
        elif command == "ingredients":
            self.output(self.builder.render_ingredients().rstrip("\n"))
        elif command == "show":
            self.output(self.builder.render().rstrip("\n"))
        elif command == "save":
            if not self.builder.save_enabled:
                self.output("Save is disabled.")
                return
            self.builder.save()
        elif command == "reset":
            draft.reset()
        elif command == "help":
            self.output(HELP_TEXT)
        else:
            raise ValueError(f'unknown command "{command}", type "help"')

    def _set(self, args: List[str]) -> None:
        if len(args) < 2:
            raise ValueError("usage: set <order> <field> <value>")
        order = _parse_int(args[0], "step order")
        field = SESSION_STEP_FIELDS.get(args[1].lower())
        if field is None:
            raise ValueError(f'unknown step field "{args[1]}"')
        raw = " ".join(args[2:])
        if field in INT_STEP_FIELDS:
            value = None if raw in ("", "-") and field == "ingredient_id" else _parse_int(raw, args[1])
        elif field == "name":
            value = raw
        else:
            value = None if raw in ("", "-") else raw
        if self.builder.draft.update_step(order, **{field: value}) is None:
            self.output(f"No step with order {order}.")


def _parse_int(text: str, label: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValueError(f'{label} must be a whole number, got "{text}"') from None
