"""Unit tests for the recipe text-generation adapter."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from headcook.services.recipes import RecipeGenerator, parse_recipes, strip_markdown_fences
from headcook.utils.errors import RecipeGenerationError, RecipeParseError


RECIPES_JSON = json.dumps(
    [
        {"name": "Chicken Fried Rice", "instructions": "Fry the rice. Add the chicken."},
        {"name": "Chicken Congee", "instructions": "Simmer rice until soft."},
    ]
)


def make_client(text=None, side_effect=None):
    """Gemini client mock whose aio.models.generate_content answers with `text`."""
    client = MagicMock()
    response = MagicMock()
    response.text = text
    response.candidates = []
    client.aio.models.generate_content = AsyncMock(return_value=response, side_effect=side_effect)
    return client


class TestStripMarkdownFences:
    """Test removal of markdown code fences around model answers."""

    @pytest.mark.parametrize(
        "raw",
        [
            f"```json\n{RECIPES_JSON}\n```",
            f"```JSON\n{RECIPES_JSON}\n```",
            f"```\n{RECIPES_JSON}\n```",
            f"  ```json{RECIPES_JSON}```  ",
            f"\n{RECIPES_JSON}\n",
        ],
    )
    def test_fences_are_removed(self, raw):
        assert strip_markdown_fences(raw) == RECIPES_JSON

    def test_strip_is_idempotent(self):
        once = strip_markdown_fences(f"```json\n{RECIPES_JSON}\n```")

        assert strip_markdown_fences(once) == once

    def test_empty_input(self):
        assert strip_markdown_fences("") == ""
        assert strip_markdown_fences(None) == ""


class TestParseRecipes:
    """Test parsing of model answers into Recipe models."""

    def test_parses_fenced_array(self):
        recipes = parse_recipes(f"```json\n{RECIPES_JSON}\n```")

        assert [recipe.name for recipe in recipes] == ["Chicken Fried Rice", "Chicken Congee"]
        assert all(recipe.image is None for recipe in recipes)

    def test_accepts_object_wrapping_recipes(self):
        recipes = parse_recipes(json.dumps({"recipes": json.loads(RECIPES_JSON)}))

        assert len(recipes) == 2

    @pytest.mark.parametrize(
        "text",
        [
            "Here are some recipes you might like!",
            '{"name": "Chicken Fried Rice"}',
            '[{"name": "Chicken Fried Rice"}]',
            '[{"title": "x", "steps": "y"}]',
            "[1, 2, 3]",
        ],
    )
    def test_invalid_answers_raise_parse_error(self, text):
        with pytest.raises(RecipeParseError) as exc_info:
            parse_recipes(text)

        assert exc_info.value.details == "Recipe response could not be parsed"

    def test_empty_array_raises_parse_error(self):
        with pytest.raises(RecipeParseError, match="no recipes"):
            parse_recipes("[]")


class TestRecipeGenerator:
    """Test RecipeGenerator against a mocked Gemini client."""

    @pytest.mark.asyncio
    async def test_generate_returns_recipes(self):
        client = make_client(text=f"```json\n{RECIPES_JSON}\n```")
        generator = RecipeGenerator(client=client)

        recipes = await generator.generate("chicken, rice", ["Italian"])

        assert len(recipes) == 2
        client.aio.models.generate_content.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_generate_sends_prompt_and_generation_settings(self):
        client = make_client(text=RECIPES_JSON)
        generator = RecipeGenerator(client=client)

        await generator.generate("chicken, rice", ["Italian", "Thai"])

        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == generator.model
        assert "chicken, rice" in kwargs["contents"]
        assert "Italian, Thai" in kwargs["contents"]
        assert kwargs["config"].temperature == 0.7
        assert kwargs["config"].max_output_tokens == 1500
        assert "JSON array" in kwargs["config"].system_instruction

    @pytest.mark.asyncio
    async def test_upstream_failure_raises_generation_error(self):
        client = make_client(side_effect=RuntimeError("503 UNAVAILABLE"))
        generator = RecipeGenerator(client=client)

        with pytest.raises(RecipeGenerationError) as exc_info:
            await generator.generate("chicken")

        assert exc_info.value.status_code == 500
        assert exc_info.value.details == "Recipe generation service unavailable"

    @pytest.mark.asyncio
    async def test_timeout_raises_generation_error(self):
        async def hang(**kwargs):
            await asyncio.sleep(5)

        client = make_client(side_effect=hang)
        generator = RecipeGenerator(client=client)
        generator.timeout = 0.01

        with pytest.raises(RecipeGenerationError):
            await generator.generate("chicken")

    @pytest.mark.asyncio
    async def test_empty_answer_raises_generation_error(self):
        generator = RecipeGenerator(client=make_client(text=""))

        with pytest.raises(RecipeGenerationError):
            await generator.generate("chicken")

    @pytest.mark.asyncio
    async def test_non_json_answer_raises_parse_error(self):
        generator = RecipeGenerator(client=make_client(text="Sorry, I can only talk about food."))

        with pytest.raises(RecipeParseError):
            await generator.generate("chicken")
