"""Identity subscription for the client.

The identity provider's SDK reports sign-in and sign-out through a callback.
IdentityBroker turns that into an explicit subscription:

    subscription = broker.subscribe(on_identity_changed)   # called now with current identity
    broker.publish(ClientIdentity(uid=..., email=..., token=...))
    subscription.cancel()                                   # no more events

The sign-in flow itself (popup, one-tap) is outside this package; whatever
performs it calls publish() with the result, or publish(None) on sign-out.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from headcook.utils.logger import logger


@dataclass(frozen=True)
class ClientIdentity:
    uid: str
    email: str
    token: str


IdentityListener = Callable[[Optional[ClientIdentity]], None]


class Subscription:
    """Handle returned by subscribe(). cancel() is idempotent."""

    def __init__(self, broker: "IdentityBroker", listener: IdentityListener) -> None:
        self._broker = broker
        self._listener = listener
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._broker._remove(self)


class IdentityBroker:
    """Holds the current identity and notifies subscribers when it changes."""

    def __init__(self, identity: Optional[ClientIdentity] = None) -> None:
        self._identity = identity
        self._subscriptions: list[Subscription] = []

    @property
    def identity(self) -> Optional[ClientIdentity]:
        return self._identity

    @property
    def token(self) -> Optional[str]:
        return self._identity.token if self._identity else None

    def subscribe(self, listener: IdentityListener) -> Subscription:
        """Register a listener and immediately deliver the current identity to it."""
        subscription = Subscription(self, listener)
        self._subscriptions.append(subscription)
        self._deliver(subscription, self._identity)
        return subscription

    def publish(self, identity: Optional[ClientIdentity]) -> None:
        """Set the current identity (None = signed out) and notify live subscribers."""
        self._identity = identity
        logger.debug(f"Identity changed: {identity.uid if identity else 'signed out'}")
        for subscription in list(self._subscriptions):
            self._deliver(subscription, identity)

    def _deliver(self, subscription: Subscription, identity: Optional[ClientIdentity]) -> None:
        if not subscription.active:
            return
        try:
            subscription._listener(identity)
        except Exception as e:
            # Listener failures are isolated per subscription
            logger.error(f"Identity listener failed: {e}", exc_info=True)

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
