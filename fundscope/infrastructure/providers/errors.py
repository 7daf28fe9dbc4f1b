"""Provider-layer exceptions.

ProviderUnavailable never leaves an adapter: it is converted to an
Outcome at the adapter boundary.
"""


class ProviderUnavailable(Exception):
    """A provider call failed: timeout, connection error, non-2xx or undecodable body."""
