"""
Custom exceptions for the DOI deposit pipeline.
"""


class DepositError(Exception):
    """Base exception for all deposit pipeline errors."""
    pass


class DocumentError(DepositError):
    """
    Error producing a registration document for an object.

    Raised when:
    - The document producer cannot render the object
    - A required field for the document schema is missing

    Fatal to the object's attempt only; the run continues.
    """

    def __init__(self, message: str, object_id: str = None, filter_key: str = None):
        super().__init__(message)
        self.object_id = object_id
        self.filter_key = filter_key


class TransportError(DepositError):
    """
    Error communicating with the registration authority.

    Raised when:
    - The authority is unreachable
    - The request times out
    """

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigError(DepositError):
    """
    Error in deposit configuration.

    Raised when:
    - Configuration file is invalid
    - A collaborator factory returns the wrong shape
    - The transport type is unknown
    """
    pass


class PluginUnavailableError(DepositError):
    """The registration plugin cannot be located or loaded."""
    pass
