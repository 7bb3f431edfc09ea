from __future__ import annotations

import dataclasses
from typing import Any


GENERIC_ERROR_MESSAGE = "Sorry, something went wrong"


class CityExplorerError(Exception):
    pass


class StorageError(CityExplorerError):
    """The persistence engine rejected or could not execute a query."""


class ProviderError(CityExplorerError):
    pass


class ProviderTransportError(ProviderError):
    """Provider unreachable, non-success status, or undecodable body."""


class ProviderPayloadError(ProviderError):
    """Provider answered but an item is missing fields we map from."""


class ProviderEmptyResult(ProviderError):
    """Provider answered successfully with zero usable items."""


@dataclasses.dataclass(slots=True)
class APIError(Exception):
    """Request-level error (bad query parameters and the like).

    Always answered with the generic 500; code, message and details are
    only logged.
    """

    code: str
    message: str
    details: Any | None = None
