"""Error taxonomy for Head Cook AI.

Every error a request can end in is a HeadCookError carrying the HTTP status
and the public message returned to the client. Upstream diagnostics stay in
the server log; only `message` and `details` ever reach the response body.
"""

from typing import Optional


class HeadCookError(Exception):
    """Base error with an HTTP status and a client-safe message."""

    status_code: int = 500
    message: str = "Internal server error"
    details: Optional[str] = None

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        if details is not None:
            self.details = details
        super().__init__(self.message if self.details is None else f"{self.message}: {self.details}")


class AuthenticationMissingError(HeadCookError):
    status_code = 401
    message = "Authentication required"


class AuthenticationInvalidError(HeadCookError):
    status_code = 401
    message = "Invalid token"


class QuotaExceededError(HeadCookError):
    status_code = 403
    message = "Free search limit reached"


class InvalidSearchError(HeadCookError):
    status_code = 400
    message = "Invalid request"


class SearchFailedError(HeadCookError):
    """Recipe search failed after the quota was consumed."""

    status_code = 500
    message = "Search failed"


class RecipeGenerationError(SearchFailedError):
    """The text-generation call failed, timed out or returned nothing."""

    details = "Recipe generation service unavailable"


class RecipeParseError(SearchFailedError):
    """The text-generation call answered, but not with a recipe array."""

    details = "Recipe response could not be parsed"


class ImageGenerationError(HeadCookError):
    status_code = 500
    message = "Image generation failed"
