"""Port interfaces for the tlsigner application layer.

These protocol interfaces define contracts for adapters.
Core signing logic depends on these ports, never on host-specific types.
"""

__all__ = [
    "Configuration",
    "ConfigStorePort",
    "InterceptorPort",
    "OutboundRequest",
    "SignerPort",
]

from tlsigner.app.ports.config_store import Configuration, ConfigStorePort
from tlsigner.app.ports.interceptor import InterceptorPort, OutboundRequest
from tlsigner.app.ports.signer import SignerPort
