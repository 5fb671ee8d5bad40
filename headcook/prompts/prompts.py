"""Prompts for recipe text and recipe photo generation.

Provides factory functions for the system instruction, the user content of a
search, and the image prompt for a recipe name. The system instruction pins the
output format to a bare JSON array; the adapter still strips markdown fences
because the model does not always comply.
"""

from typing import Optional, Sequence


def _get_output_format_section(recipe_count: int) -> str:
    """Output format rules, repeated verbatim in every request."""
    return f"""
## Output Format (STRICT)

- Respond with a valid JSON array of exactly {recipe_count} objects.
- Each object has exactly two string properties: "name" and "instructions".
- "instructions" lists every ingredient with quantities, then every preparation step in order.
- Do NOT include any markdown formatting, code fences or code block syntax in your response.
- Do NOT add any text before or after the JSON array.

Example:
[{{"name": "Garlic Butter Chicken", "instructions": "Ingredients: ... Steps: 1. ... 2. ..."}}]
"""


def get_recipe_system_instructions(recipe_count: int = 3) -> str:
    """Build the chef-persona system instruction.

    Args:
        recipe_count: Number of recipes the model must return.

    Returns:
        str: System instruction for the recipe text model.
    """
    return (
        "You are an expert chef and know all possible recipes. "
        "You will only give recipes based on the ingredients provided. "
        "You will not give any other response no matter what. "
        f"You will generate {recipe_count} recipes using the provided ingredients. "
        "You will give detailed instructions on how to make the recipes. "
        "Leave no step unexplained. "
        "Common pantry staples (salt, pepper, oil, water) may be assumed.\n"
        + _get_output_format_section(recipe_count)
    )


def build_recipe_prompt(ingredients: str, cuisines: Optional[Sequence[str]] = None) -> str:
    """Build the user content for one search.

    Args:
        ingredients: Free-text ingredient list, usually comma-separated.
        cuisines: Optional cuisine names appended as a style directive.

    Returns:
        str: User message with the ingredients and, if any, the cuisine constraint.
    """
    prompt = f"Ingredients: {ingredients.strip()}"
    if cuisines:
        label = "cuisine" if len(cuisines) == 1 else "cuisines"
        prompt += f"\n\nMake the recipes in the style of the following {label}: {', '.join(cuisines)}."
    return prompt


def build_image_prompt(recipe_name: str) -> str:
    """Fixed photorealistic template for a plated recipe."""
    return (
        f"Create a realistic image of a plate of {recipe_name.strip()}. "
        "It should look appetizing and realistic. It should be a high quality image. "
        "It should be a picture of a plate of food."
    )
