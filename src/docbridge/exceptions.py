"""docbridge exceptions."""


class DocBridgeError(Exception):
    """Base exception for docbridge errors."""


class ConfigurationError(DocBridgeError):
    """Raised when a model or store configuration cannot support an operation."""


class ValidationError(DocBridgeError):
    """Raised when caller input is rejected before any store access."""


class MissingIdentifierError(ValidationError):
    """Raised when an operation needs a document identifier that was not supplied."""


class DocumentNotFoundError(DocBridgeError):
    """Raised when the addressed document does not exist."""


class DecodeError(DocBridgeError):
    """Raised when a stored document or response envelope cannot be decoded."""


class QueryError(DocBridgeError):
    """Raised when the store rejects a request."""


class StoreConnectionError(DocBridgeError):
    """Raised when the store cannot be reached."""
