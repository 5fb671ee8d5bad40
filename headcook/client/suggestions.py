"""Ingredient autocomplete and cuisine selection helpers."""

from typing import Sequence


COMMON_INGREDIENTS = [
    "chicken", "beef", "pork", "fish", "tomato", "onion", "garlic", "potato",
    "carrot", "broccoli", "spinach", "rice", "pasta", "cheese", "egg", "milk",
    "butter", "olive oil", "salt", "pepper", "flour", "sugar", "apple", "banana",
    "orange", "lemon", "lime", "avocado", "cucumber", "lettuce", "bell pepper",
    "mushroom", "zucchini", "eggplant", "corn", "peas", "beans", "lentils",
    "chickpeas", "quinoa", "oats", "bread", "yogurt", "cream", "sour cream",
    "mayonnaise", "mustard", "ketchup", "soy sauce", "vinegar", "honey",
    "maple syrup", "chocolate", "vanilla", "cinnamon", "cumin", "paprika",
    "oregano", "basil", "thyme", "rosemary", "ginger", "turmeric", "coconut milk",
    "almond milk", "tofu", "shrimp", "salmon", "tuna", "bacon", "ham", "sausage",
]

CUISINES = [
    "Italian", "French", "Chinese", "Japanese", "Mexican", "Indian", "Thai",
    "Spanish", "Greek", "Lebanese", "Turkish", "Moroccan", "Korean", "Vietnamese",
    "Peruvian", "Ethiopian", "Brazilian", "Caribbean", "German", "Argentinian",
    "Russian", "Iranian (Persian)",
]


def split_ingredients(value: str) -> list[str]:
    """Split a comma-separated ingredient string into trimmed, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def suggest_ingredients(value: str, candidates: Sequence[str] = COMMON_INGREDIENTS) -> list[str]:
    """Suggest completions for the ingredient currently being typed.

    Only the last comma-separated term is matched, as a case-insensitive
    substring. An empty input yields no suggestions; a trailing comma (empty
    last term) matches every candidate.

    Args:
        value: Current content of the ingredient input.
        candidates: Ingredient names to match against.

    Returns:
        Matching candidates in list order.
    """
    if not value:
        return []
    last = value.split(",")[-1].strip().lower()
    return [candidate for candidate in candidates if last in candidate.lower()]


def apply_suggestion(value: str, suggestion: str) -> str:
    """Replace the term being typed with the chosen suggestion.

    >>> apply_suggestion("chicken, ri", "rice")
    'chicken, rice'
    """
    items = [item.strip() for item in value.split(",")]
    items.pop()
    return ", ".join([item for item in items if item] + [suggestion])


def toggle_cuisine(selected: Sequence[str], cuisine: str) -> list[str]:
    """Add `cuisine` to the selection, or remove it if already selected."""
    if cuisine in selected:
        return [c for c in selected if c != cuisine]
    return [*selected, cuisine]
