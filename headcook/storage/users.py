"""User record store: one record per identity id, {email, searchCount}.

record_search() is the only write path. It is atomic per identity: load (or
create with searchCount=0), check the quota policy, increment and return the
new record, with no other search for the same identity interleaving. Two
concurrent searches from one user therefore always end two counts higher.

Implementations:
- FirestoreUserStore: Firestore transaction (retried by the SDK on contention)
- InMemoryUserStore: dict guarded by an asyncio.Lock (local development, tests)
"""

import asyncio
from typing import Optional

from firebase_admin import firestore

from headcook.models.models import Identity, UserRecord
from headcook.services.quota import QuotaPolicy
from headcook.utils.config import config
from headcook.utils.logger import logger


class UserStore:
    """Storage interface for per-user search counters."""

    async def get(self, identity_id: str) -> Optional[UserRecord]:
        raise NotImplementedError

    async def record_search(self, identity: Identity, policy: QuotaPolicy) -> UserRecord:
        """Atomically check the quota and count one search.

        Args:
            identity: Verified caller identity (uid is the record key).
            policy: Quota policy consulted with the pre-increment count.

        Returns:
            The updated record.

        Raises:
            QuotaExceededError: Policy rejected the search. Nothing is written.
        """
        raise NotImplementedError


class InMemoryUserStore(UserStore):
    """Process-local store. Counts are lost on restart."""

    def __init__(self) -> None:
        self._records: dict[str, UserRecord] = {}
        self._lock = asyncio.Lock()

    async def get(self, identity_id: str) -> Optional[UserRecord]:
        record = self._records.get(identity_id)
        return record.model_copy() if record else None

    async def record_search(self, identity: Identity, policy: QuotaPolicy) -> UserRecord:
        async with self._lock:
            current = await self.get(identity.uid) or UserRecord(
                identity_id=identity.uid, email=identity.email, search_count=0
            )
            policy.check(current.search_count)
            updated = UserRecord(
                identity_id=identity.uid,
                email=identity.email or current.email,
                search_count=current.search_count + 1,
            )
            self._records[identity.uid] = updated
            return updated.model_copy()


class FirestoreUserStore(UserStore):
    """Firestore-backed store; document id = identity uid."""

    def __init__(self, db=None, collection: Optional[str] = None) -> None:
        """Initialize the store.

        Args:
            db: Firestore client. Defaults to firestore.client() of the default Firebase app.
            collection: Collection name. Defaults to USERS_COLLECTION.
        """
        self.db = db if db is not None else firestore.client()
        self.collection = collection or config.USERS_COLLECTION

    def _document(self, identity_id: str):
        return self.db.collection(self.collection).document(identity_id)

    @staticmethod
    def _to_record(identity_id: str, data: Optional[dict]) -> UserRecord:
        data = data or {}
        return UserRecord(
            identity_id=identity_id,
            email=data.get("email") or "",
            search_count=int(data.get("searchCount", 0)),
        )

    async def get(self, identity_id: str) -> Optional[UserRecord]:
        snapshot = await asyncio.to_thread(self._document(identity_id).get)
        if not snapshot.exists:
            return None
        return self._to_record(identity_id, snapshot.to_dict())

    def _record_search_sync(self, identity: Identity, policy: QuotaPolicy) -> UserRecord:
        doc_ref = self._document(identity.uid)
        transaction = self.db.transaction()

        @firestore.transactional
        def _apply(transaction) -> UserRecord:
            snapshot = doc_ref.get(transaction=transaction)
            current = self._to_record(identity.uid, snapshot.to_dict() if snapshot.exists else None)
            if not snapshot.exists:
                logger.info(f"Creating user record for {identity.uid}")
            policy.check(current.search_count)
            updated = UserRecord(
                identity_id=identity.uid,
                email=identity.email or current.email,
                search_count=current.search_count + 1,
            )
            transaction.set(doc_ref, {"email": updated.email, "searchCount": updated.search_count}, merge=True)
            return updated

        return _apply(transaction)

    async def record_search(self, identity: Identity, policy: QuotaPolicy) -> UserRecord:
        # Firestore SDK is synchronous; run the transaction off the event loop
        return await asyncio.to_thread(self._record_search_sync, identity, policy)


def create_user_store(kind: Optional[str] = None) -> UserStore:
    """Build the configured store (USER_STORE)."""
    kind = kind or config.USER_STORE
    if kind == "memory":
        logger.warning("Using in-memory user store: search counts are lost on restart")
        return InMemoryUserStore()
    if kind == "firestore":
        logger.info(f"Using Firestore user store: collection '{config.USERS_COLLECTION}'")
        return FirestoreUserStore()
    raise ValueError(f"Unknown user store: {kind}")
