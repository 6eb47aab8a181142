"""Integration domain interfaces."""

from .repositories import IDataMappingRepository, IIntegrationRepository, ISyncJobRepository
from .services import ISecretResolver, ISyncTargetStore, ITransport, TransportResponse

__all__ = [
    "IDataMappingRepository",
    "IIntegrationRepository",
    "ISecretResolver",
    "ISyncJobRepository",
    "ISyncTargetStore",
    "ITransport",
    "TransportResponse",
]
