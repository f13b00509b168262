"""
Command line shell for the calorie estimator.

Usage:
    calorie-estimator analyze <image path | data URL | http(s) URL>
    calorie-estimator ingredient <quantity> <name>
    calorie-estimator history
    calorie-estimator clear-history
    calorie-estimator suggest <text>
"""

import argparse
import asyncio
import sys
from pathlib import Path

from calorie_estimator.adapters.image_fetcher import ImageFetcher
from calorie_estimator.app_logging import configure_logging
from calorie_estimator.config import Settings
from calorie_estimator.containers import build_container, build_history_store
from calorie_estimator.domain.errors import CalorieEstimatorError
from calorie_estimator.domain.images import ImagePayload
from calorie_estimator.domain.recipes import Ingredient, RecipeData
from calorie_estimator.services.images import from_data_url, from_path
from calorie_estimator.services.suggestions import suggest


def format_recipe(recipe: RecipeData) -> str:
    """Render a recipe as a plain-text breakdown."""
    lines = [
        recipe.recipe_name,
        f"  {recipe.total_calories} kcal  protein {recipe.protein}g  "
        f"carbs {recipe.carbs}g  fats {recipe.fats}g",
        "",
    ]
    lines.extend(format_ingredient(item) for item in recipe.ingredients)
    return "\n".join(lines)


def format_ingredient(ingredient: Ingredient) -> str:
    """Render one ingredient row."""
    return (
        f"  - {ingredient.name} ({ingredient.quantity}): {ingredient.calories} kcal, "
        f"P {ingredient.protein}g / C {ingredient.carbs}g / F {ingredient.fats}g"
    )


async def _acquire_image(source: str, fetcher: ImageFetcher) -> ImagePayload:
    if source.startswith("data:"):
        return from_data_url(source)
    if source.startswith(("http://", "https://")):
        return await fetcher.fetch(source)
    return from_path(Path(source))


async def _analyze(source: str, settings: Settings) -> RecipeData | None:
    container = build_container(settings)
    try:
        image = await _acquire_image(source, container.image_fetcher)
        container.session.set_image(image)
        return await container.session.analyze()
    finally:
        await container.close_resources()


async def _ingredient(quantity: str, name: str, settings: Settings) -> Ingredient:
    container = build_container(settings)
    try:
        return await container.inference_service.analyze_ingredient(quantity, name)
    finally:
        await container.close_resources()


def cmd_analyze(args: argparse.Namespace) -> int:
    """Analyze a dish photo and record it in history."""
    recipe = asyncio.run(_analyze(args.image, Settings()))
    if recipe is None:
        return 1
    print(format_recipe(recipe))
    return 0


def cmd_ingredient(args: argparse.Namespace) -> int:
    """Estimate nutrition for one ingredient."""
    ingredient = asyncio.run(_ingredient(args.quantity, args.name, Settings()))
    print(format_ingredient(ingredient).strip())
    return 0


def cmd_history(args: argparse.Namespace) -> int:  # noqa: ARG001
    """List recent analyses."""
    history = build_history_store(Settings()).load()
    if not history:
        print("No recent analyses.")
        return 0
    for index, recipe in enumerate(history):
        print(f"[{index}] {recipe.recipe_name}: {recipe.total_calories} kcal")
    return 0


def cmd_clear_history(args: argparse.Namespace) -> int:  # noqa: ARG001
    """Erase history."""
    build_history_store(Settings()).clear()
    print("History cleared.")
    return 0


def cmd_suggest(args: argparse.Namespace) -> int:
    """Print ingredient name suggestions."""
    for name in suggest(args.text):
        print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="calorie-estimator",
        description="Calorie Estimator: AI nutrition breakdown for meal photos.",
    )
    subparsers = parser.add_subparsers(dest="command")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a dish photo")
    analyze_parser.add_argument("image", help="Image path, data URL or http(s) URL")
    analyze_parser.set_defaults(func=cmd_analyze)

    ingredient_parser = subparsers.add_parser(
        "ingredient", help="Estimate nutrition for one ingredient"
    )
    ingredient_parser.add_argument("quantity", help="Amount, e.g. '1 cup'")
    ingredient_parser.add_argument("name", help="Ingredient name, e.g. 'rice'")
    ingredient_parser.set_defaults(func=cmd_ingredient)

    history_parser = subparsers.add_parser("history", help="List recent analyses")
    history_parser.set_defaults(func=cmd_history)

    clear_parser = subparsers.add_parser("clear-history", help="Erase history")
    clear_parser.set_defaults(func=cmd_clear_history)

    suggest_parser = subparsers.add_parser("suggest", help="Suggest ingredients")
    suggest_parser.add_argument("text", help="Part of an ingredient name")
    suggest_parser.set_defaults(func=cmd_suggest)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the command line shell."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 0
    try:
        return args.func(args)
    except (CalorieEstimatorError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
