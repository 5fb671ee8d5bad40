"""Quota-gated recipe search.

search() runs, in order:
1. reject blank ingredients (nothing is counted)
2. user_store.record_search(): create the record if absent, check the quota
   policy, increment searchCount (atomic per identity)
3. recipe_generator.generate(): one text-generation call
4. return the recipes and the new searchCount

The increment is not rolled back when generation fails: a failed search still
consumes quota.
"""

from typing import Optional, Sequence

from headcook.models.models import Identity, SearchResponse
from headcook.services.quota import QuotaPolicy
from headcook.services.recipes import RecipeGenerator
from headcook.storage.users import UserStore
from headcook.utils.errors import InvalidSearchError, SearchFailedError
from headcook.utils.logger import logger


class SearchService:
    def __init__(self, user_store: UserStore, policy: QuotaPolicy, recipe_generator: RecipeGenerator) -> None:
        self.user_store = user_store
        self.policy = policy
        self.recipe_generator = recipe_generator

    async def search(
        self,
        identity: Identity,
        ingredients: str,
        cuisines: Optional[Sequence[str]] = None,
    ) -> SearchResponse:
        """Count one search for `identity` and generate recipes.

        Raises:
            InvalidSearchError: Ingredients are blank.
            QuotaExceededError: The quota policy rejected the search.
            RecipeGenerationError / RecipeParseError: Generation failed (quota already consumed).
        """
        if not ingredients or not ingredients.strip():
            raise InvalidSearchError(details="Please enter at least one ingredient")

        cuisines = list(cuisines or [])
        log_context = {"uid": identity.uid}

        user = await self.user_store.record_search(identity, self.policy)
        logger.info(
            f"Search #{user.search_count} ({self.policy.name} policy): "
            f"ingredients={ingredients!r} cuisines={cuisines}",
            extra=log_context,
        )

        try:
            recipes = await self.recipe_generator.generate(ingredients, cuisines)
        except SearchFailedError as e:
            logger.error(
                f"Search #{user.search_count} failed after counting ({type(e).__name__}); quota not refunded",
                extra=log_context,
            )
            raise

        return SearchResponse(recipes=recipes, search_count=user.search_count)
