"""Shared pytest configuration and fakes.

Seeds a test environment before collection (no real API keys, in-memory user
store) and provides fakes for the external collaborators: the identity
provider, the text-generation adapter and the image-generation adapter.
"""

import os
from unittest.mock import AsyncMock

import pytest

# Seed the environment before any headcook module builds its Config
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ["USER_STORE"] = "memory"
os.environ["QUOTA_POLICY"] = "counter"
os.environ["SEARCH_LIMIT"] = "0"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from headcook.auth.firebase import TokenVerifier  # noqa: E402
from headcook.models.models import Identity, Recipe  # noqa: E402
from headcook.services.images import ImageGenerator  # noqa: E402
from headcook.services.recipes import RecipeGenerator  # noqa: E402
from headcook.utils.errors import AuthenticationInvalidError  # noqa: E402


ALICE = Identity(uid="alice-uid", email="alice@example.com")
BOB = Identity(uid="bob-uid", email="bob@example.com")

TOKENS = {
    "alice-token": ALICE,
    "bob-token": BOB,
}


class FakeTokenVerifier(TokenVerifier):
    """Accepts the tokens in TOKENS, rejects everything else."""

    def __init__(self) -> None:
        self.verified: list[str] = []

    async def verify(self, token: str) -> Identity:
        self.verified.append(token)
        if token not in TOKENS:
            raise AuthenticationInvalidError()
        return TOKENS[token]


@pytest.fixture
def alice():
    return ALICE


@pytest.fixture
def bob():
    return BOB


@pytest.fixture
def token_verifier():
    return FakeTokenVerifier()


@pytest.fixture
def recipes():
    return [
        Recipe(name="Chicken Fried Rice", instructions="Fry the rice. Add the chicken."),
        Recipe(name="Chicken Congee", instructions="Simmer rice until soft. Shred chicken on top."),
        Recipe(name="Rice Stuffed Peppers", instructions="Stuff peppers with rice. Bake 30 minutes."),
    ]


@pytest.fixture
def recipe_generator(recipes):
    generator = AsyncMock(spec=RecipeGenerator)
    generator.generate.return_value = recipes
    return generator


@pytest.fixture
def image_generator():
    generator = AsyncMock(spec=ImageGenerator)

    async def _generate(recipe_name: str) -> str:
        return f"https://images.example.com/{recipe_name.replace(' ', '-').lower()}.png"

    generator.generate.side_effect = _generate
    return generator
