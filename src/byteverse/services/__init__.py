"""Business logic services for the ByteVerse application."""

from .abuse import AbuseMonitor, Blocklist
from .principals import Principal, PrincipalResolver, RoleGate
from .sweeper import AbuseSweepWorker
from .tokens import TokenDomain, TokenVerifier

__all__ = [
    "AbuseMonitor",
    "AbuseSweepWorker",
    "Blocklist",
    "Principal",
    "PrincipalResolver",
    "RoleGate",
    "TokenDomain",
    "TokenVerifier",
]
