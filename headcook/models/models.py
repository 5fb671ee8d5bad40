"""Data models and schemas for Head Cook AI.

Defines Pydantic models for request/response validation and domain objects.
Wire format is camelCase (searchCount, recipeName, imageUrl); Python attributes
are snake_case. Models accept either form on input.
"""

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting both spellings on input."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class Identity(BaseModel):
    """Decoded identity from the identity provider."""

    uid: Annotated[str, Field(min_length=1, description="Stable user id issued by the identity provider")]
    email: Annotated[str, Field(description="Email on the identity token (may be empty)")] = ""


class UserRecord(CamelModel):
    """Per-user search counter, one per identity id."""

    identity_id: Annotated[str, Field(alias="identityId", min_length=1)]
    email: str = ""
    search_count: Annotated[int, Field(alias="searchCount", ge=0)] = 0


class Recipe(BaseModel):
    """A generated recipe. `image` is attached by the client after image generation."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, max_length=200, description="Recipe name")]
    instructions: Annotated[str, Field(min_length=1, description="Full preparation instructions")]
    image: Annotated[Optional[str], Field(description="Image URL (http(s) or data URL)")] = None

    @field_validator("instructions", mode="before")
    @classmethod
    def join_instruction_steps(cls, value):
        """Models sometimes answer with a list of steps instead of one string."""
        if isinstance(value, list):
            return "\n".join(str(step).strip() for step in value if str(step).strip())
        return value


class SearchRequest(BaseModel):
    """Body of POST /search.

    `ingredients` is free text (usually comma-separated). Blank ingredients are
    rejected by the search service so the response carries the service's error body.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    ingredients: Annotated[str, Field(max_length=2000, description="Comma-separated ingredients")]
    cuisines: Annotated[List[str], Field(default_factory=list, max_length=25, description="Cuisine names")]

    @field_validator("cuisines", mode="before")
    @classmethod
    def normalize_cuisines(cls, cuisines):
        """Drop blank names and duplicates, keeping selection order."""
        if cuisines is None:
            return []
        if isinstance(cuisines, str):
            cuisines = cuisines.split(",")
        seen: list[str] = []
        for cuisine in cuisines:
            name = str(cuisine).strip()
            if name and name not in seen:
                seen.append(name)
        return seen


class SearchResponse(CamelModel):
    """Body of a successful POST /search."""

    recipes: List[Recipe]
    search_count: Annotated[int, Field(alias="searchCount", ge=0)]


class ImageRequest(CamelModel):
    """Body of POST /generate-image."""

    recipe_name: Annotated[str, Field(alias="recipeName", min_length=1, max_length=200)]


class ImageResponse(CamelModel):
    image_url: Annotated[str, Field(alias="imageUrl")]


class ErrorResponse(BaseModel):
    """Error body shared by every failing endpoint."""

    error: str
    details: Optional[str] = None
