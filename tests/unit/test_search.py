"""Unit tests for the quota-gated search service."""

import asyncio

import pytest

from headcook.services.quota import CounterQuotaPolicy, SingleUseQuotaPolicy
from headcook.services.search import SearchService
from headcook.storage.users import InMemoryUserStore
from headcook.utils.errors import InvalidSearchError, QuotaExceededError, RecipeGenerationError, RecipeParseError


@pytest.fixture
def user_store():
    return InMemoryUserStore()


class TestSearchService:
    """Test the ordering of validation, quota and generation."""

    @pytest.mark.asyncio
    async def test_search_returns_recipes_and_count(self, user_store, recipe_generator, recipes, alice):
        service = SearchService(user_store, CounterQuotaPolicy(), recipe_generator)

        response = await service.search(alice, "chicken, rice", ["Italian"])

        assert response.recipes == recipes
        assert response.search_count == 1
        recipe_generator.generate.assert_awaited_once_with("chicken, rice", ["Italian"])

    @pytest.mark.asyncio
    async def test_blank_ingredients_are_rejected_before_counting(self, user_store, recipe_generator, alice):
        service = SearchService(user_store, CounterQuotaPolicy(), recipe_generator)

        with pytest.raises(InvalidSearchError) as exc_info:
            await service.search(alice, "   ")

        assert exc_info.value.status_code == 400
        assert await user_store.get(alice.uid) is None
        recipe_generator.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_quota_exceeded_skips_generation(self, user_store, recipe_generator, alice):
        service = SearchService(user_store, SingleUseQuotaPolicy(), recipe_generator)
        await service.search(alice, "eggs")

        with pytest.raises(QuotaExceededError):
            await service.search(alice, "eggs")

        assert recipe_generator.generate.await_count == 1
        assert (await user_store.get(alice.uid)).search_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [RecipeGenerationError(), RecipeParseError()])
    async def test_failed_generation_still_consumes_quota(self, user_store, recipe_generator, alice, error):
        recipe_generator.generate.side_effect = error
        service = SearchService(user_store, CounterQuotaPolicy(), recipe_generator)

        with pytest.raises(type(error)):
            await service.search(alice, "eggs")

        assert (await user_store.get(alice.uid)).search_count == 1

    @pytest.mark.asyncio
    async def test_counter_limit_is_enforced(self, user_store, recipe_generator, alice):
        service = SearchService(user_store, CounterQuotaPolicy(2), recipe_generator)

        await service.search(alice, "eggs")
        await service.search(alice, "eggs")
        with pytest.raises(QuotaExceededError):
            await service.search(alice, "eggs")

        assert (await user_store.get(alice.uid)).search_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_searches_count_every_search(self, user_store, recipe_generator, alice):
        service = SearchService(user_store, CounterQuotaPolicy(), recipe_generator)

        responses = await asyncio.gather(*(service.search(alice, "eggs") for _ in range(10)))

        assert sorted(response.search_count for response in responses) == list(range(1, 11))
        assert (await user_store.get(alice.uid)).search_count == 10
