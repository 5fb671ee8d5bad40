"""HTTP client for the Head Cook AI backend.

Thin async wrapper over httpx. Every non-2xx answer becomes an ApiError with the
status code and the backend's {error, details} body; transport failures
(connection refused, timeout) become an ApiError without status code.
"""

from typing import Optional, Sequence

import httpx

from headcook.models.models import SearchResponse, UserRecord
from headcook.utils.config import config
from headcook.utils.logger import logger


class ApiError(Exception):
    """Backend call failed. status_code is None for network errors."""

    def __init__(self, status_code: Optional[int], message: str, details: Optional[str] = None) -> None:
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(f"{status_code or 'network'}: {message}" + (f" ({details})" if details else ""))

    @property
    def auth_required(self) -> bool:
        """True when the backend asked the user to sign in or reported the quota exhausted."""
        return self.status_code in (401, 403)


class HeadCookClient:
    """Async client for /search, /generate-image and /me."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend URL. Default: API_BASE_URL.
            timeout: Per-request timeout in seconds. Default: CLIENT_TIMEOUT.
            transport: Optional httpx transport (e.g. httpx.ASGITransport for in-process use).
        """
        self._http = httpx.AsyncClient(
            base_url=base_url or config.API_BASE_URL,
            timeout=timeout or config.CLIENT_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "HeadCookClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def _headers(token: Optional[str]) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _post(self, path: str, payload: dict, token: Optional[str]) -> dict:
        return await self._request("POST", path, token, json=payload)

    async def _request(self, method: str, path: str, token: Optional[str], **kwargs) -> dict:
        try:
            response = await self._http.request(method, path, headers=self._headers(token), **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {type(e).__name__}: {e}")
            raise ApiError(None, "Network error", str(e) or type(e).__name__) from e

        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("error") or response.reason_phrase or "Request failed"
        logger.warning(f"{method} {path} -> {response.status_code}: {message}")
        raise ApiError(response.status_code, message, body.get("details"))

    async def search(self, ingredients: str, cuisines: Sequence[str] = (), token: Optional[str] = None) -> SearchResponse:
        data = await self._post("/search", {"ingredients": ingredients, "cuisines": list(cuisines)}, token)
        return SearchResponse.model_validate(data)

    async def generate_image(self, recipe_name: str, token: Optional[str] = None) -> str:
        data = await self._post("/generate-image", {"recipeName": recipe_name}, token)
        return data["imageUrl"]

    async def me(self, token: Optional[str] = None) -> UserRecord:
        data = await self._request("GET", "/me", token)
        return UserRecord.model_validate(data)
