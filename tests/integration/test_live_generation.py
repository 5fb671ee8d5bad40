"""Live tests against the Gemini API.

Skipped unless HEADCOOK_LIVE_TESTS=1. They spend real quota: one text call and
one image call.
"""

import os

import pytest
from google import genai

from headcook.services.images import ImageGenerator
from headcook.services.recipes import RecipeGenerator
from headcook.utils.logger import logger


@pytest.fixture(scope="module")
def live_client():
    return genai.Client(api_key=os.environ["GEMINI_API_KEY"])


@pytest.mark.live
@pytest.mark.asyncio
async def test_live_recipe_generation(live_client):
    generator = RecipeGenerator(client=live_client)

    recipes = await generator.generate("chicken, rice, garlic", ["Italian"])

    logger.info(f"Live recipes: {[recipe.name for recipe in recipes]}")
    assert 1 <= len(recipes) <= generator.recipe_count
    assert all(recipe.name and recipe.instructions for recipe in recipes)


@pytest.mark.live
@pytest.mark.asyncio
async def test_live_image_generation(live_client):
    generator = ImageGenerator(client=live_client)

    image_url = await generator.generate("Chicken Risotto")

    assert image_url.startswith("data:image/")
