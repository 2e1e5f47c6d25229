from __future__ import annotations


class ProviderError(Exception):
    """Backend problem inside an adapter; never crosses the adapter boundary."""

    kind = "unavailable"


class ProviderUnavailable(ProviderError):
    """Missing credentials, connection error or timeout."""

    kind = "unavailable"


class ProviderRejected(ProviderError):
    """Backend answered with a non-2xx status."""

    kind = "rejected"


class ProviderMalformed(ProviderError):
    """Envelope or generated JSON could not be turned into a draft."""

    kind = "malformed"


class ProviderEmpty(ProviderError):
    """Backend answered but generated no text."""

    kind = "empty"


class WorkOrderNotFound(KeyError):
    pass
