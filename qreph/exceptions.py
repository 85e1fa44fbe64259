"""Library exceptions."""


class QrephException(Exception):
    """Generic qreph exception."""


# Construction-time failures. None of these are retried.
class InvalidPayload(QrephException):
    """The note content is empty."""

    def __init__(self, message: str = "no content provided"):
        super().__init__(message)


class EntropyError(QrephException):
    """The system random source failed or came up short."""


class BindError(QrephException):
    """The HTTP listener could not be bound."""


class AddressDiscoveryError(QrephException):
    """No outbound address could be determined for the link."""


class ConfigError(QrephException):
    """Configuration values are missing or out of range."""


# Operational
class ShutdownError(QrephException):
    """Connections were still open when the shutdown timeout elapsed."""

    def __init__(self, message: str, stranded: int = 0):
        super().__init__(message)
        self.stranded = stranded
