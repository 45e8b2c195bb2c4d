"""Exceptions raised by the export engine."""


class ExportError(Exception):
    """Base class for export failures."""

    pass


class MediaResolutionError(ExportError):
    """A media reference could not be decoded or fetched.

    Recoverable: the card is exported without that media slot.
    """

    pass


class SchemaInitializationError(ExportError):
    """The collection database could not be created or seeded."""

    pass


class SerializationError(ExportError):
    """An export artifact could not be serialized."""

    pass


class ExportIOError(ExportError):
    """The terminal export stage failed or the artifact could not be delivered."""

    pass
