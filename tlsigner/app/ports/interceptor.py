"""Interceptor port and the request value it operates on."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Protocol


@dataclass(frozen=True, slots=True)
class OutboundRequest:
    """Immutable view of an HTTP request about to leave the host.

    Header names compare case-insensitively. Duplicates are kept in order and
    :meth:`header` returns the last matching value.
    """

    method: str
    path: str
    headers: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    body: bytes = b""

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        headers: Iterable[tuple[str, str]] = (),
        body: bytes = b"",
    ) -> OutboundRequest:
        return cls(method=method, path=path, headers=tuple(headers), body=body)

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        value = None
        for key, candidate in self.headers:
            if key.lower() == wanted:
                value = candidate
        return value

    def header_values(self, name: str) -> list[str]:
        wanted = name.lower()
        return [value for key, value in self.headers if key.lower() == wanted]

    def with_removed_header(self, name: str) -> OutboundRequest:
        wanted = name.lower()
        kept = tuple((key, value) for key, value in self.headers if key.lower() != wanted)
        return replace(self, headers=kept)

    def with_added_header(self, name: str, value: str) -> OutboundRequest:
        return replace(self, headers=self.headers + ((name, value),))


class InterceptorPort(Protocol):
    """Port implemented by request interceptors.

    Host adapters call :meth:`on_request` synchronously for each outgoing
    request and forward whatever it returns.
    """

    def on_request(self, request: OutboundRequest) -> OutboundRequest:
        """Return the request to transmit in place of ``request``."""
        ...
