"""Integration service boundaries."""

from .sync_target import ISyncTargetStore
from .transport import ISecretResolver, ITransport, TransportResponse

__all__ = ["ISecretResolver", "ISyncTargetStore", "ITransport", "TransportResponse"]
