"""Recipe generation through the Gemini text API.

One search = one generate_content call. The model is told to answer with a bare
JSON array of {name, instructions}; the answer is still treated as untrusted:

1. strip_markdown_fences(): remove ```json ... ``` wrapping if present
2. parse_recipes(): json.loads + schema validation into Recipe models

Two failure modes are kept apart so callers and tests can tell them apart:
- RecipeGenerationError: the call itself failed (SDK error, non-2xx, timeout, empty answer)
- RecipeParseError: the call succeeded but the text is not a recipe array

No retries: a failed call is terminal for the search that issued it.
"""

import asyncio
import json
import re
from typing import Optional, Sequence

from google import genai
from google.genai import types
from pydantic import ValidationError

from headcook.models.models import Recipe
from headcook.prompts.prompts import build_recipe_prompt, get_recipe_system_instructions
from headcook.utils.config import config
from headcook.utils.errors import RecipeGenerationError, RecipeParseError
from headcook.utils.logger import logger


# Opening fence with optional language tag, and closing fence, at the edges of the text
_OPENING_FENCE = re.compile(r"^\s*```[\w-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_markdown_fences(text: str) -> str:
    """Remove a markdown code fence wrapping the model answer.

    Handles ```json, ```JSON, bare ``` and fences without newlines. Text that is
    not fenced comes back trimmed, so the function is idempotent.

    Args:
        text: Raw model answer.

    Returns:
        Answer without the surrounding fence, trimmed.
    """
    if not text:
        return ""
    cleaned = _OPENING_FENCE.sub("", text, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_recipes(text: str) -> list[Recipe]:
    """Parse a model answer into recipes.

    Accepts a JSON array of recipe objects (the requested format) and, leniently,
    an object wrapping that array under "recipes".

    Args:
        text: Raw model answer, fenced or not.

    Returns:
        Non-empty list of validated Recipe models.

    Raises:
        RecipeParseError: If the answer is not JSON, not a recipe array, empty,
            or any item misses a name or instructions.
    """
    cleaned = strip_markdown_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise RecipeParseError() from e

    if isinstance(parsed, dict) and isinstance(parsed.get("recipes"), list):
        parsed = parsed["recipes"]
    if not isinstance(parsed, list):
        raise RecipeParseError()
    if not parsed:
        raise RecipeParseError(details="Recipe response contained no recipes")

    try:
        return [Recipe.model_validate(item) for item in parsed]
    except ValidationError as e:
        raise RecipeParseError() from e


class RecipeGenerator:
    """Text-generation adapter: (ingredients, cuisines) -> recipes."""

    def __init__(self, client: Optional[genai.Client] = None) -> None:
        """Initialize the adapter.

        Args:
            client: Gemini client. Created from GEMINI_API_KEY when omitted.
        """
        self.client = client or genai.Client(api_key=config.GEMINI_API_KEY)
        self.model = config.GEMINI_MODEL
        self.recipe_count = config.RECIPE_COUNT
        self.timeout = config.GENERATION_TIMEOUT

    def _build_config(self) -> types.GenerateContentConfig:
        thinking_config = None
        if config.THINKING_BUDGET is not None:
            thinking_config = types.ThinkingConfig(thinking_budget=config.THINKING_BUDGET)
        return types.GenerateContentConfig(
            system_instruction=get_recipe_system_instructions(self.recipe_count),
            temperature=config.TEMPERATURE,
            max_output_tokens=config.MAX_OUTPUT_TOKENS,
            thinking_config=thinking_config,
        )

    async def generate(self, ingredients: str, cuisines: Optional[Sequence[str]] = None) -> list[Recipe]:
        """Generate recipes for the given ingredients.

        Args:
            ingredients: Free-text ingredient list.
            cuisines: Optional cuisine constraint.

        Returns:
            Non-empty list of Recipe models (no images attached).

        Raises:
            RecipeGenerationError: Upstream call failed, timed out, or returned no text.
            RecipeParseError: Upstream text is not a valid recipe array.
        """
        prompt = build_recipe_prompt(ingredients, cuisines)
        logger.debug(f"Requesting {self.recipe_count} recipes from {self.model}: {prompt!r}")

        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=self._build_config(),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Recipe generation timed out after {self.timeout}s (model={self.model})")
            raise RecipeGenerationError() from e
        except Exception as e:
            # SDK errors carry status code and response body; keep them in the log only
            status = getattr(e, "code", None) or getattr(e, "status_code", None)
            logger.error(
                f"Recipe generation call failed (model={self.model}, status={status}): {e}",
                exc_info=True,
            )
            raise RecipeGenerationError() from e

        text = response.text if response is not None else None
        if not text:
            finish_reason = None
            if response is not None and response.candidates:
                finish_reason = response.candidates[0].finish_reason
            logger.error(f"Recipe generation returned no text (finish_reason={finish_reason})")
            raise RecipeGenerationError()

        logger.debug(f"Raw recipe response: {text!r}")
        try:
            recipes = parse_recipes(text)
        except RecipeParseError:
            logger.warning(f"Failed to parse recipe response as JSON array: {text[:500]!r}")
            raise

        logger.info(f"✓ Generated {len(recipes)} recipe(s): {[recipe.name for recipe in recipes]}")
        return recipes
