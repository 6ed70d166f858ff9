class HealthWalletError(Exception):
    def __init__(self, reason: str, details: dict = None):
        self.reason = reason
        self.details = details or {}
        super().__init__(reason)


class ExtractionUnavailable(HealthWalletError):
    """The OCR engine could not produce text (corrupt image, engine error, timeout)."""


class PersistenceFailure(HealthWalletError):
    """The store rejected a write."""


class DuplicateGrant(HealthWalletError):
    pass


class DuplicateUser(HealthWalletError):
    pass


class NotFound(HealthWalletError):
    pass


class AccessDenied(HealthWalletError):
    pass


class InvalidCredentials(HealthWalletError):
    pass


class InvalidGrant(HealthWalletError):
    pass
