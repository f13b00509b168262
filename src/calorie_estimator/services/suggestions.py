"""Ingredient name suggestions for the add-ingredient form."""

COMMON_INGREDIENTS: tuple[str, ...] = (
    "Almonds",
    "Apple",
    "Avocado",
    "Bacon",
    "Banana",
    "Basil",
    "Beef",
    "Bell pepper",
    "Black beans",
    "Blueberries",
    "Bread",
    "Broccoli",
    "Brown rice",
    "Butter",
    "Carrot",
    "Cheddar cheese",
    "Chicken breast",
    "Chicken thigh",
    "Chickpeas",
    "Chili sauce",
    "Coconut milk",
    "Cream",
    "Cucumber",
    "Egg",
    "Feta cheese",
    "Garlic",
    "Ginger",
    "Greek yogurt",
    "Ground beef",
    "Ham",
    "Honey",
    "Kidney beans",
    "Lemon",
    "Lentils",
    "Lettuce",
    "Mayonnaise",
    "Milk",
    "Mozzarella",
    "Mushrooms",
    "Noodles",
    "Oats",
    "Olive oil",
    "Onion",
    "Orange",
    "Parmesan",
    "Pasta",
    "Peanut butter",
    "Peas",
    "Pork",
    "Potato",
    "Quinoa",
    "Rice",
    "Salmon",
    "Sesame oil",
    "Shrimp",
    "Soy sauce",
    "Spinach",
    "Strawberries",
    "Sugar",
    "Sweet potato",
    "Tofu",
    "Tomato",
    "Tomato sauce",
    "Tortilla",
    "Tuna",
    "Turkey",
    "Vegetable oil",
    "Walnuts",
    "White rice",
    "Yogurt",
    "Zucchini",
)

MIN_PREFIX_LENGTH = 2


def suggest(
    text: str, limit: int = 5, candidates: tuple[str, ...] = COMMON_INGREDIENTS
) -> list[str]:
    """Return up to ``limit`` ingredient names containing ``text``."""
    needle = text.strip().lower()
    if len(needle) < MIN_PREFIX_LENGTH:
        return []
    return [item for item in candidates if needle in item.lower()][:limit]
