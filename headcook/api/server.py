"""FastAPI application factory for Head Cook AI.

Wires the collaborators and exposes the HTTP API:

- POST /search          (auth) ingredients + cuisines -> recipes + searchCount
- POST /generate-image  (auth) recipeName -> imageUrl
- GET  /me              (auth) caller's user record
- GET  /health, GET /

Collaborators not passed to create_app() are built from configuration, which is
validated first. Tests pass fakes for all of them.
"""

from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from headcook.auth.firebase import FirebaseTokenVerifier, TokenVerifier, initialize_firebase, require_identity
from headcook.models.models import (
    ErrorResponse,
    Identity,
    ImageRequest,
    ImageResponse,
    SearchRequest,
    SearchResponse,
    UserRecord,
)
from headcook.services.images import ImageGenerator
from headcook.services.quota import QuotaPolicy, create_quota_policy
from headcook.services.recipes import RecipeGenerator
from headcook.services.search import SearchService
from headcook.storage.users import UserStore, create_user_store
from headcook.utils.config import config
from headcook.utils.errors import HeadCookError
from headcook.utils.logger import logger


def _error_body(error: str, details: Optional[str] = None) -> dict:
    return ErrorResponse(error=error, details=details).model_dump(exclude_none=True)


def _register_error_handlers(app: FastAPI) -> None:
    """Map the error taxonomy onto status codes and the {error, details} body."""

    @app.exception_handler(HeadCookError)
    async def handle_headcook_error(request: Request, exc: HeadCookError) -> JSONResponse:
        log = logger.warning if exc.status_code < 500 else logger.error
        log(f"{request.method} {request.url.path} -> {exc.status_code} {type(exc).__name__}: {exc}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.details))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        details = f"{location}: {first.get('msg')}" if location else first.get("msg")
        logger.warning(f"{request.method} {request.url.path} -> 400 invalid body: {details}")
        return JSONResponse(status_code=400, content=_error_body("Invalid request", details))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} -> 500 unexpected error: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content=_error_body("Internal server error"))


def _register_routes(app: FastAPI) -> None:
    @app.get("/")
    async def root() -> dict:
        return {
            "message": "Head Cook AI API is running!",
            "endpoints": {
                "search": "/search",
                "generate_image": "/generate-image",
                "me": "/me",
            },
        }

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post(
        "/search",
        response_model=SearchResponse,
        response_model_exclude_none=True,
        responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
                   403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def search(
        body: SearchRequest,
        request: Request,
        identity: Identity = Depends(require_identity),
    ) -> SearchResponse:
        service: SearchService = request.app.state.search_service
        return await service.search(identity, body.ingredients, body.cuisines)

    @app.post(
        "/generate-image",
        response_model=ImageResponse,
        responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def generate_image(
        body: ImageRequest,
        request: Request,
        identity: Identity = Depends(require_identity),
    ) -> ImageResponse:
        generator: ImageGenerator = request.app.state.image_generator
        logger.info(f"Image requested for {body.recipe_name!r}", extra={"uid": identity.uid})
        image_url = await generator.generate(body.recipe_name)
        return ImageResponse(image_url=image_url)

    @app.get("/me", response_model=UserRecord, responses={401: {"model": ErrorResponse}})
    async def me(request: Request, identity: Identity = Depends(require_identity)) -> UserRecord:
        store: UserStore = request.app.state.user_store
        record = await store.get(identity.uid)
        return record or UserRecord(identity_id=identity.uid, email=identity.email, search_count=0)


def create_app(
    user_store: Optional[UserStore] = None,
    token_verifier: Optional[TokenVerifier] = None,
    recipe_generator: Optional[RecipeGenerator] = None,
    image_generator: Optional[ImageGenerator] = None,
    quota_policy: Optional[QuotaPolicy] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        user_store: Search-counter store. Default: USER_STORE (Firestore or in-memory).
        token_verifier: Identity token verifier. Default: Firebase.
        recipe_generator: Text-generation adapter. Default: Gemini.
        image_generator: Image-generation adapter. Default: Imagen.
        quota_policy: Search quota policy. Default: QUOTA_POLICY / SEARCH_LIMIT.

    Returns:
        Configured FastAPI app with collaborators on app.state.

    Raises:
        ValueError: If configuration is invalid and a default collaborator is needed.
    """
    logger.info("=== Initializing Head Cook AI API ===")

    needs_config = None in (user_store, token_verifier, recipe_generator, image_generator, quota_policy)
    if needs_config:
        config.validate()

    logger.info("Step 1/4: Configuring identity verification...")
    if token_verifier is None or (user_store is None and config.USER_STORE == "firestore"):
        initialize_firebase()
    token_verifier = token_verifier or FirebaseTokenVerifier()

    logger.info("Step 2/4: Configuring user store and quota policy...")
    user_store = user_store or create_user_store()
    quota_policy = quota_policy or create_quota_policy()
    logger.info(f"✓ Quota policy: {quota_policy.name}")

    logger.info("Step 3/4: Configuring generation adapters...")
    recipe_generator = recipe_generator or RecipeGenerator()
    image_generator = image_generator or ImageGenerator()

    logger.info("Step 4/4: Registering routes...")
    app = FastAPI(
        title="Head Cook AI API",
        description="Recipe suggestions from your ingredients, with a photo of every dish",
        version="1.0.0",
        debug=config.DEBUG,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials="*" not in config.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.state.token_verifier = token_verifier
    app.state.user_store = user_store
    app.state.image_generator = image_generator
    app.state.search_service = SearchService(user_store, quota_policy, recipe_generator)

    _register_error_handlers(app)
    _register_routes(app)

    logger.info("=== API initialization complete ===")
    return app
