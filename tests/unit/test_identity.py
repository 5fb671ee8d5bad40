"""Unit tests for the client identity subscription."""

from headcook.client.identity import ClientIdentity, IdentityBroker


ALICE = ClientIdentity(uid="alice-uid", email="alice@example.com", token="alice-token")


class TestIdentityBroker:
    def test_subscribe_delivers_current_identity(self):
        broker = IdentityBroker(ALICE)
        received = []

        broker.subscribe(received.append)

        assert received == [ALICE]

    def test_signed_out_broker_delivers_none(self):
        received = []

        IdentityBroker().subscribe(received.append)

        assert received == [None]

    def test_publish_notifies_subscribers(self):
        broker = IdentityBroker()
        received = []
        broker.subscribe(received.append)

        broker.publish(ALICE)
        broker.publish(None)

        assert received == [None, ALICE, None]
        assert broker.identity is None

    def test_token_follows_identity(self):
        broker = IdentityBroker()
        assert broker.token is None

        broker.publish(ALICE)

        assert broker.token == "alice-token"

    def test_cancelled_subscription_receives_nothing(self):
        broker = IdentityBroker()
        received = []
        subscription = broker.subscribe(received.append)

        subscription.cancel()
        subscription.cancel()
        broker.publish(ALICE)

        assert received == [None]
        assert subscription.active is False

    def test_failing_listener_does_not_block_others(self):
        broker = IdentityBroker()
        received = []

        def broken(identity):
            raise RuntimeError("listener bug")

        broker.subscribe(broken)
        broker.subscribe(received.append)
        broker.publish(ALICE)

        assert received == [None, ALICE]
