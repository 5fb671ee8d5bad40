"""Authentication gate backed by Firebase Authentication.

Every protected endpoint depends on require_identity():

1. extract_bearer_token(): read the Authorization header ("Bearer <token>" or a bare token)
2. TokenVerifier.verify(): validate the ID token with the identity provider
3. attach the decoded Identity to request.state.identity

Missing token -> AuthenticationMissingError (401). Any verification failure ->
AuthenticationInvalidError (401). Verification is not retried and mutates nothing.
"""

import asyncio
from typing import Optional

import firebase_admin
from fastapi import Header, Request
from firebase_admin import auth, credentials
from firebase_admin import exceptions as firebase_exceptions

from headcook.models.models import Identity
from headcook.utils.config import config
from headcook.utils.errors import AuthenticationInvalidError, AuthenticationMissingError
from headcook.utils.logger import logger


def initialize_firebase() -> firebase_admin.App:
    """Initialize the default Firebase app once and return it.

    Uses the service-account file in FIREBASE_CREDENTIALS when set, otherwise
    application default credentials (Cloud Run, GKE, gcloud auth).
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if config.FIREBASE_CREDENTIALS:
        logger.info(f"Initializing Firebase with service account: {config.FIREBASE_CREDENTIALS}")
        cred = credentials.Certificate(config.FIREBASE_CREDENTIALS)
    else:
        logger.info("Initializing Firebase with application default credentials")
        cred = credentials.ApplicationDefault()

    options = {"projectId": config.FIREBASE_PROJECT_ID} if config.FIREBASE_PROJECT_ID else None
    return firebase_admin.initialize_app(cred, options)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an Authorization header value.

    Args:
        authorization: Raw header value, e.g. "Bearer eyJhbGci...". A bare token
            without scheme is accepted as well.

    Returns:
        The token string.

    Raises:
        AuthenticationMissingError: Header absent, blank, or "Bearer" with no token.
    """
    if not authorization or not authorization.strip():
        raise AuthenticationMissingError()

    parts = authorization.strip().split(None, 1)
    if parts[0].lower() == "bearer":
        if len(parts) < 2 or not parts[1].strip():
            raise AuthenticationMissingError()
        return parts[1].strip()
    return authorization.strip()


class TokenVerifier:
    """Verifies identity tokens. Subclasses talk to a real identity provider."""

    async def verify(self, token: str) -> Identity:
        raise NotImplementedError


class FirebaseTokenVerifier(TokenVerifier):
    """Verifies Firebase ID tokens with firebase_admin.auth."""

    def __init__(self, app: Optional[firebase_admin.App] = None, check_revoked: bool = False) -> None:
        self.app = app
        self.check_revoked = check_revoked

    async def verify(self, token: str) -> Identity:
        """Verify an ID token and return the caller identity.

        Raises:
            AuthenticationInvalidError: Token malformed, expired, revoked, for another
                project, or the provider's signing keys could not be fetched.
        """
        try:
            # verify_id_token may fetch signing certificates over the network
            decoded = await asyncio.to_thread(
                auth.verify_id_token, token, app=self.app, check_revoked=self.check_revoked
            )
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            logger.warning(f"Token verification failed: {type(e).__name__}: {e}")
            raise AuthenticationInvalidError() from e

        uid = decoded.get("uid") or decoded.get("sub")
        if not uid:
            logger.warning("Verified token carries no uid")
            raise AuthenticationInvalidError()
        return Identity(uid=uid, email=decoded.get("email") or "")


async def require_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> Identity:
    """FastAPI dependency: authenticate the request or fail with 401."""
    token = extract_bearer_token(authorization)
    verifier: TokenVerifier = request.app.state.token_verifier
    identity = await verifier.verify(token)
    request.state.identity = identity
    logger.debug(f"Authenticated {identity.uid}", extra={"uid": identity.uid})
    return identity
