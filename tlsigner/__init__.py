"""tlsigner - detached JWS request signing for intercepting proxies.

Attaches ``Tl-Signature`` and ``Idempotency-Key`` headers to outgoing HTTP
requests using an EC private key.
"""

__version__ = "0.1.0"
__author__ = "tlsigner Contributors"

from tlsigner.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
