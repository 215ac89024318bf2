"""Exception hierarchy for vaultmd.

Absence (unknown key, version or scope) is never an exception: lookups return
``None`` so callers can tell "nothing to show" apart from a real failure.
"""


class VaultError(Exception):
    """Base class for all vault errors."""

    pass


class ConfigurationError(VaultError):
    """Invalid scope or settings, or a database written by a newer release."""

    pass


class IntegrityError(VaultError):
    """Stored content no longer matches the hash recorded for it."""

    pass


class PreconditionError(VaultError):
    """An operation was requested in a state that does not allow it."""

    pass
