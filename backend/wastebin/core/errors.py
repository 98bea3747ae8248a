# wastebin/core/errors.py


class PasteError(Exception):
    """Base class for every failure the paste engine reports."""


class NotFound(PasteError):
    """Paste is absent, expired or already burned."""


class AuthenticationFailure(PasteError):
    """Password missing or incorrect for a protected paste."""


class Conflict(PasteError):
    """A paste with this id already exists."""


class IdSpaceExhausted(PasteError):
    """No free id was found within the retry bound."""


class StorageUnavailable(PasteError):
    """The backing store failed to complete an operation."""


class CryptoFailure(PasteError):
    """Stored cryptographic parameters or ciphertext are corrupt."""
