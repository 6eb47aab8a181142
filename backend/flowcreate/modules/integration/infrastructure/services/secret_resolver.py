"""Environment-backed secret resolution."""

import os
from collections.abc import Mapping

from flowcreate.modules.integration.domain.errors import TransportError
from flowcreate.modules.integration.domain.interfaces.services import ISecretResolver


class EnvironmentSecretResolver(ISecretResolver):
    """Resolves ``secret_ref`` values from environment variables.

    A reference of the form ``env:NAME`` reads ``NAME``; any other reference
    is read as ``{prefix}{REF}`` with the reference upper-cased and dashes
    and dots turned into underscores.
    """

    def __init__(
        self,
        prefix: str = "FLOWCREATE_SECRET_",
        environ: Mapping[str, str] | None = None,
    ):
        self.prefix = prefix
        self._environ = environ if environ is not None else os.environ

    def variable_name(self, secret_ref: str) -> str:
        if secret_ref.startswith("env:"):
            return secret_ref[4:]
        normalized = secret_ref.upper().replace("-", "_").replace(".", "_")
        return f"{self.prefix}{normalized}"

    async def resolve(self, secret_ref: str) -> str:
        name = self.variable_name(secret_ref)
        value = self._environ.get(name)
        if not value:
            raise TransportError(f"Secret '{name}' is not configured")
        return value


class StaticSecretResolver(ISecretResolver):
    """Resolves secrets from a fixed mapping, for local runs and tests."""

    def __init__(self, secrets: Mapping[str, str]):
        self._secrets = dict(secrets)

    async def resolve(self, secret_ref: str) -> str:
        try:
            return self._secrets[secret_ref]
        except KeyError as e:
            raise TransportError(f"Secret reference '{secret_ref}' is unknown") from e
