"""
Errores del núcleo de generación

Cada fallo del pipeline tiene su propio tipo para que la capa HTTP pueda
traducirlo al código de estado adecuado sin inspeccionar mensajes.
"""


class StudioError(Exception):
    """Base class for every error raised by the generation core."""


class InvalidDimensions(StudioError, ValueError):
    """A custom ``WxH`` size is unparseable or not strictly positive."""


class BackendError(StudioError):
    """The generation backend failed (network, auth or quota)."""


class NoImageInResponse(StudioError):
    """The backend answered, but without any inline image data."""

    def __init__(self, message: str, text: str = ""):
        super().__init__(message)
        self.text = text


class DecodeError(StudioError):
    """A raster payload could not be decoded as an image."""
