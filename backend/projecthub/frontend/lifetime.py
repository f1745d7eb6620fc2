"""Lifetime tokens for results that arrive after their consumer has moved on.

A view captures a token before awaiting a request and applies the result only
if the token is still current when the request completes. Ending the lifetime
(unmount) makes every outstanding token stale at once.
"""

from dataclasses import dataclass


class Lifetime:
    def __init__(self) -> None:
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def token(self) -> "LifetimeToken":
        return LifetimeToken(lifetime=self, generation=self._generation)

    def end(self) -> None:
        """Invalidate every token issued so far."""
        self._generation += 1


@dataclass(frozen=True)
class LifetimeToken:
    lifetime: Lifetime
    generation: int

    @property
    def alive(self) -> bool:
        return self.lifetime.generation == self.generation


class LatestRequest:
    """Requests of one kind where only the most recently started may apply."""

    def __init__(self, lifetime: Lifetime) -> None:
        self._lifetime = lifetime
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def begin(self) -> "RequestTicket":
        self._latest += 1
        return RequestTicket(
            token=self._lifetime.token(), sequence=self, number=self._latest
        )


@dataclass(frozen=True)
class RequestTicket:
    token: LifetimeToken
    sequence: LatestRequest
    number: int

    @property
    def current(self) -> bool:
        return self.token.alive and self.sequence.latest == self.number
