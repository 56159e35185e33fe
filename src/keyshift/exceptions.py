"""Library exceptions for the keyshift package.

Exception Hierarchy:
    KeyshiftError (base)
    +-- ConfigurationError
    +-- ConnectionSetupError
    +-- KeyDiscoveryError
    +-- UnsupportedKeyTypeError

Only the first three are fatal to a migration run. UnsupportedKeyTypeError is
raised and handled inside the per-key transfer and never reaches callers of
``Migrator.run()``.
"""


class KeyshiftError(Exception):
    """Base exception for keyshift library."""

    pass


class ConfigurationError(KeyshiftError):
    """Raised when migration configuration is missing or invalid."""

    pass


class ConnectionSetupError(KeyshiftError):
    """Raised when a source or target connection cannot be established."""

    def __init__(self, endpoint: str, message: str) -> None:
        self.endpoint = endpoint
        super().__init__(f"Failed to connect to {endpoint}: {message}")


class KeyDiscoveryError(KeyshiftError):
    """Raised when scanning the source keyspace fails."""

    def __init__(self, pattern: str, message: str) -> None:
        self.pattern = pattern
        super().__init__(f"Key discovery failed for pattern '{pattern}': {message}")


class UnsupportedKeyTypeError(KeyshiftError):
    """
    Raised when a key type has no reader or writer.

    Attributes:
        key: The key being processed
        type_tag: The raw type tag reported by the store or returned by a transform
    """

    def __init__(self, key: str, type_tag: str) -> None:
        self.key = key
        self.type_tag = type_tag
        super().__init__(f"Key '{key}' has unsupported type '{type_tag}'")
