"""Error taxonomy for contact discovery."""


class ContactDiscoveryError(Exception):
    """Base class for every error raised by this package."""


class ContactPermissionError(ContactDiscoveryError):
    """Contact access was not granted. Needs user action before retrying."""

    def __init__(self, message: str = "Contact permission not granted"):
        super().__init__(message)


class InvalidInputError(ContactDiscoveryError, ValueError):
    """A phone number, email or request argument failed local validation."""


class HashingFailedError(ContactDiscoveryError):
    """The hash primitive itself failed. The cause is chained."""


class NotSupportedError(ContactDiscoveryError):
    """The host platform has no way to read contacts."""


class ContactSyncFailedError(ContactDiscoveryError):
    """Unexpected failure while fetching contacts. Fatal for the sync run."""


class DiscoveryRequestError(ContactDiscoveryError):
    """
    A remote discovery call failed. The message is safe to show to the user;
    code carries the callable-function error code when there was one.
    """

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code
