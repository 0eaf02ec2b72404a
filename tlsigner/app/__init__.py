"""Application layer for tlsigner.

This layer orchestrates signing decisions without host-specific types.
Configuration sources and host transports are reached via port interfaces.
"""

__all__ = [
    "ApplyConfiguration",
    "RequestInterceptor",
    "SignWith",
    "SigningDecision",
    "SigningPolicy",
    "Skip",
    "SkipReason",
    "ValidateKey",
]

from tlsigner.app.commands import ApplyConfiguration, ValidateKey
from tlsigner.app.interceptor import RequestInterceptor
from tlsigner.app.policy import SignWith, SigningDecision, SigningPolicy, Skip, SkipReason
