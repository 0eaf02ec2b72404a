"""Concrete adapters wiring application ports to built-in implementations.

The mitmproxy addon is imported on demand from
``tlsigner.app.adapters.mitmproxy_addon`` since mitmproxy is optional.
"""

from __future__ import annotations

from .config_store import InMemoryConfigStore, SettingsConfigStore
from .signer import TlSignatureSigner

__all__ = [
    "InMemoryConfigStore",
    "SettingsConfigStore",
    "TlSignatureSigner",
]
