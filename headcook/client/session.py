"""Client search session: state, reducer and orchestration.

State machine:

    IDLE --Submit(non-empty)--> SEARCHING --SearchSucceeded--> IDLE (outcome SUCCESS)
                                          --SearchFailed-----> IDLE (outcome FAILED)
                                          --Cancel-----------> IDLE (outcome CANCELLED)

transition() is a pure reducer over immutable SessionState, so every transition
is testable without I/O. SearchSession owns the side effects: it runs the
backend search and the per-recipe image fan-out as one asyncio.Task (the
cancellation handle) and feeds outcomes back through the reducer.

Each Submit carries a request id. Outcomes for any other id are ignored, which
is how a cancelled search's late answer is dropped. Cancellation is client-side
only: the backend finishes (and counts) the search regardless.
"""

import asyncio
import itertools
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Sequence, Union

from headcook.client.api import ApiError, HeadCookClient
from headcook.client.identity import IdentityBroker
from headcook.models.models import Recipe
from headcook.utils.logger import logger


EMPTY_INGREDIENTS_MESSAGE = "Please enter at least one ingredient."
AUTH_REQUIRED_MESSAGE = "You've reached your free search limit. Please sign in to continue searching."
SEARCH_FAILED_MESSAGE = "Failed to fetch recipes. Please try again."


class Phase(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SessionState:
    """Everything the UI renders. Never mutated; the reducer returns new states."""

    phase: Phase = Phase.IDLE
    ingredients: str = ""
    cuisines: tuple[str, ...] = ()
    recipes: tuple[Recipe, ...] = ()
    favorites: tuple[Recipe, ...] = ()
    error: Optional[str] = None
    auth_required: bool = False
    search_count: Optional[int] = None
    request_id: Optional[int] = None
    last_outcome: Optional[Outcome] = None

    @property
    def is_loading(self) -> bool:
        return self.phase is Phase.SEARCHING

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "ingredients": self.ingredients,
            "cuisines": list(self.cuisines),
            "recipes": [recipe.model_dump() for recipe in self.recipes],
            "favorites": [recipe.model_dump() for recipe in self.favorites],
            "error": self.error,
            "auth_required": self.auth_required,
            "search_count": self.search_count,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
        }


@dataclass(frozen=True)
class Submit:
    request_id: int
    ingredients: str
    cuisines: tuple[str, ...] = ()


@dataclass(frozen=True)
class SearchSucceeded:
    request_id: int
    recipes: tuple[Recipe, ...]
    search_count: Optional[int] = None


@dataclass(frozen=True)
class SearchFailed:
    request_id: int
    message: str
    auth_required: bool = False


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class AddFavorite:
    recipe: Recipe


@dataclass(frozen=True)
class RemoveFavorite:
    name: str


Event = Union[Submit, SearchSucceeded, SearchFailed, Cancel, AddFavorite, RemoveFavorite]


def transition(state: SessionState, event: Event) -> SessionState:
    """Apply one event to the session state.

    Args:
        state: Current state.
        event: Event to apply.

    Returns:
        The next state (may be `state` itself when the event is ignored).
    """
    if isinstance(event, Submit):
        if state.phase is Phase.SEARCHING:
            return state
        if not event.ingredients.strip():
            return replace(state, error=EMPTY_INGREDIENTS_MESSAGE, auth_required=False, last_outcome=None)
        return replace(
            state,
            phase=Phase.SEARCHING,
            ingredients=event.ingredients,
            cuisines=tuple(event.cuisines),
            error=None,
            auth_required=False,
            request_id=event.request_id,
            last_outcome=None,
        )

    if isinstance(event, SearchSucceeded):
        if state.phase is not Phase.SEARCHING or event.request_id != state.request_id:
            return state
        return replace(
            state,
            phase=Phase.IDLE,
            recipes=tuple(event.recipes),
            search_count=event.search_count if event.search_count is not None else state.search_count,
            request_id=None,
            last_outcome=Outcome.SUCCESS,
        )

    if isinstance(event, SearchFailed):
        if state.phase is not Phase.SEARCHING or event.request_id != state.request_id:
            return state
        return replace(
            state,
            phase=Phase.IDLE,
            recipes=(),
            error=event.message,
            auth_required=event.auth_required,
            request_id=None,
            last_outcome=Outcome.FAILED,
        )

    if isinstance(event, Cancel):
        if state.phase is not Phase.SEARCHING:
            return state
        return replace(
            state,
            phase=Phase.IDLE,
            recipes=(),
            error=None,
            auth_required=False,
            request_id=None,
            last_outcome=Outcome.CANCELLED,
        )

    if isinstance(event, AddFavorite):
        if any(favorite.name == event.recipe.name for favorite in state.favorites):
            return state
        return replace(state, favorites=(*state.favorites, event.recipe))

    if isinstance(event, RemoveFavorite):
        return replace(state, favorites=tuple(f for f in state.favorites if f.name != event.name))

    raise TypeError(f"Unknown session event: {event!r}")


async def attach_images(recipes: Sequence[Recipe], fetch_image) -> list[Recipe]:
    """Fetch one image per recipe concurrently and attach it.

    All calls are awaited together; a failed call leaves that recipe's image as
    None and never affects the others.

    Args:
        recipes: Recipes without images.
        fetch_image: Async callable recipe name -> image URL.

    Returns:
        Recipes in the input order, each with `image` set or None.
    """
    results = await asyncio.gather(*(fetch_image(recipe.name) for recipe in recipes), return_exceptions=True)
    merged = []
    for recipe, result in zip(recipes, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.warning(f"No image for {recipe.name!r}: {result}")
            result = None
        merged.append(recipe.model_copy(update={"image": result}))
    return merged


StateListener = Callable[[SessionState], None]


class SearchSession:
    """Runs searches against the backend and keeps the session state."""

    def __init__(
        self,
        client: HeadCookClient,
        identity: Optional[IdentityBroker] = None,
        state: Optional[SessionState] = None,
    ) -> None:
        self.client = client
        self.identity = identity or IdentityBroker()
        self.state = state or SessionState()
        self._task: Optional[asyncio.Task] = None
        self._request_ids = itertools.count(1)
        self._listeners: list[StateListener] = []

    def on_change(self, listener: StateListener) -> Callable[[], None]:
        """Register a state listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, event: Event) -> SessionState:
        previous = self.state
        self.state = transition(previous, event)
        if self.state is not previous:
            for listener in list(self._listeners):
                listener(self.state)
        return self.state

    def submit(self, ingredients: str, cuisines: Sequence[str] = ()) -> SessionState:
        """Start a search. Blank ingredients and re-submission while searching are no-ops for the network."""
        request_id = next(self._request_ids)
        state = self.dispatch(Submit(request_id, ingredients, tuple(cuisines)))
        if state.request_id != request_id:
            return state
        self._task = asyncio.create_task(self._run(request_id, ingredients, tuple(cuisines)))
        self._task.add_done_callback(lambda task: self._settle_cancelled(request_id, task))
        return state

    def _settle_cancelled(self, request_id: int, task: asyncio.Task) -> None:
        # A task cancelled from outside cancel() (e.g. its awaiting caller was cancelled)
        # must still bring the session back to IDLE
        if task.cancelled() and self.state.request_id == request_id:
            self.dispatch(Cancel())

    def cancel(self) -> SessionState:
        """Abandon the in-flight search. Its answer, if it arrives, is ignored."""
        state = self.dispatch(Cancel())
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return state

    async def wait(self) -> SessionState:
        """Wait for the last submitted search (if any) to settle, cancelled or not."""
        task = self._task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise
        return self.state

    async def search(self, ingredients: str, cuisines: Sequence[str] = ()) -> SessionState:
        """submit() then wait()."""
        self.submit(ingredients, cuisines)
        return await self.wait()

    def add_favorite(self, recipe: Recipe) -> SessionState:
        return self.dispatch(AddFavorite(recipe))

    def remove_favorite(self, name: str) -> SessionState:
        return self.dispatch(RemoveFavorite(name))

    async def _run(self, request_id: int, ingredients: str, cuisines: tuple[str, ...]) -> None:
        token = self.identity.token
        try:
            response = await self.client.search(ingredients, cuisines, token=token)
            recipes = await attach_images(
                response.recipes, lambda name: self.client.generate_image(name, token=token)
            )
        except ApiError as e:
            logger.warning(f"Search {request_id} failed: {e}")
            message = AUTH_REQUIRED_MESSAGE if e.auth_required else SEARCH_FAILED_MESSAGE
            self.dispatch(SearchFailed(request_id, message, auth_required=e.auth_required))
            return
        except asyncio.CancelledError:
            logger.info(f"Search {request_id} cancelled")
            raise
        except Exception as e:
            logger.error(f"Search {request_id} failed unexpectedly: {e}", exc_info=True)
            self.dispatch(SearchFailed(request_id, SEARCH_FAILED_MESSAGE))
            return

        self.dispatch(SearchSucceeded(request_id, tuple(recipes), response.search_count))
