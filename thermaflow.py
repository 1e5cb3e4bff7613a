import argparse
import logging
import os
from typing import Iterator, Optional, Sequence

from dotenv import load_dotenv

from constants import API_URL_ENV, DEFAULT_API_URL
from recipe_builder import BuilderSession, RecipeBuilder
from recipe_calculations import format_cost, format_duration
from recipe_draft import RecipeDraft
from recipe_models import InfusionRecipe
from thermaflow_client import (
    GATEWAY_ERRORS,
    delete_recipe,
    get_recipe,
    list_ingredients,
    list_recipes,
)


def prompt_lines(prompt: str = "thermaflow> ") -> Iterator[str]:
    while True:
        try:
            yield input(prompt)
        except EOFError:
            return


def render_recipe(recipe: InfusionRecipe) -> str:
    md = [f"# {recipe.name}", ""]
    if recipe.theme:
        md.append(f"_Theme: {recipe.theme}_")
        md.append("")
    if recipe.description:
        md.append(recipe.description)
        md.append("")
    if recipe.steps:
        md.append("## Steps")
        for step in recipe.steps:
            line = (
                f"{step.step_order + 1}. {step.name}: {format_duration(step.duration_seconds)}, "
                f"heat {step.heat_intensity}, {step.scent_dosage_ml} ml"
            )
            if step.ingredient_name:
                line += f" of {step.ingredient_name}"
            md.append(line)
        md.append("")
    if recipe.total_duration is not None:
        md.append(f"Total Duration: {format_duration(recipe.total_duration)}")
    if recipe.total_cost is not None:
        md.append(f"Total Cost: {format_cost(recipe.total_cost)}")
    return "\n".join(md).strip() + "\n"


def recipe_row(recipe: InfusionRecipe) -> str:
    duration = format_duration(recipe.total_duration or 0)
    cost = format_cost(recipe.total_cost or 0)
    return f"{recipe.id}\t{recipe.name}\t{len(recipe.steps)} steps\t{duration}\t{cost}"


def run_builder(api_url: str) -> None:
    builder = RecipeBuilder(RecipeDraft(), api_url)
    builder.load_ingredients()
    print(builder.render(), end="")
    print('Type "help" for commands.')
    BuilderSession(builder).run(prompt_lines())


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Compose sauna infusion recipes and manage them on a ThermaFlow backend.")
    ap.add_argument("--api-url", default=None, help=f"Backend base URL (default: ${API_URL_ENV} or {DEFAULT_API_URL})")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("build", help="Open the interactive recipe builder")
    sub.add_parser("list", help="List saved recipes")
    show = sub.add_parser("show", help="Print one recipe")
    show.add_argument("recipe_id", type=int)
    delete = sub.add_parser("delete", help="Delete a recipe")
    delete.add_argument("recipe_id", type=int)
    sub.add_parser("ingredients", help="List the ingredient catalog")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> None:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    api_url = args.api_url or os.getenv(API_URL_ENV) or DEFAULT_API_URL

    if args.command == "build":
        run_builder(api_url)
        return

    try:
        if args.command == "list":
            recipes = list_recipes(api_url)
            if not recipes:
                print("No recipes saved yet.")
            for recipe in recipes:
                print(recipe_row(recipe))
        elif args.command == "show":
            print(render_recipe(get_recipe(api_url, args.recipe_id)), end="")
        elif args.command == "delete":
            delete_recipe(api_url, args.recipe_id)
            print(f"Deleted recipe {args.recipe_id}.")
        elif args.command == "ingredients":
            for ingredient in list_ingredients(api_url):
                print(f"{ingredient.id}\t{ingredient.name}\t{ingredient.scent_profile.value}\t{format_cost(ingredient.cost_per_ml)}/ml")
    except GATEWAY_ERRORS as err:
        raise SystemExit(str(err))


if __name__ == "__main__":
    main()
