from typing import Protocol
from weakref import WeakSet

from clamm.types.abstract import AbstractPoolState


class AbstractPublisherMessage:
    """
    A message sent by a `Publisher` to a `Subscriber`.
    """


class PoolStateMessage(AbstractPublisherMessage):
    """
    A message notifying that the publisher (a liquidity pool) has committed a new state.
    """

    state: AbstractPoolState


class PoolEventMessage(AbstractPublisherMessage):
    """
    A message recording a completed pool operation, equivalent to an emitted contract event.
    """


class Publisher(Protocol):
    """
    Can send a `Message` to a `Subscriber`
    """

    _subscribers: WeakSet["Subscriber"]

    def subscribe(self, subscriber: "Subscriber") -> None:
        """
        Subscribe to receive messages from this `Publisher`
        """

    def unsubscribe(self, subscriber: "Subscriber") -> None:
        """
        Stop receiving messages from this `Publisher`
        """


class PublisherMixin:
    """
    A set of default methods to accept subscribe & unsubscribe requests. Classes using this mixin
    meet the `Publisher` protocol requirements.
    """

    def subscribe(self: Publisher, subscriber: "Subscriber") -> None:
        self._subscribers.add(subscriber)

    def unsubscribe(self: Publisher, subscriber: "Subscriber") -> None:
        self._subscribers.discard(subscriber)


class Subscriber(Protocol):
    """
    Can subscribe to messages from a `Publisher`
    """

    def notify(self, publisher: "Publisher", message: AbstractPublisherMessage) -> None:
        """
        Deliver `message` to `Subscriber`
        """
