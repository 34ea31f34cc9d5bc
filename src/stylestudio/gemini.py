"""
Cliente para la interacción con Gemini.

Este módulo contiene toda la comunicación con la API de generación de
imágenes de Google, proporcionando un método para enviar el documento de
instrucciones y obtener la respuesta en un formato tipado.

Responsabilidades:
- Construir las partes (texto e imágenes) de la petición
- Traducir la configuración de capacidades del modelo a la del SDK
- Decodificar de forma defensiva la respuesta en partes de texto o de imagen
- Convertir los errores del SDK o de red en ``BackendError``
"""

import base64
import logging
from typing import Annotated, Literal, Optional, Protocol, Union

from google import genai
from google.genai import types
from pydantic import BaseModel, Field

from stylestudio.config import DEFAULT_IMAGE_MIME, RESPONSE_MODALITIES
from stylestudio.errors import BackendError
from stylestudio.prompting import Segment
from stylestudio.schemas import QualityTier, ReferenceAsset

logger = logging.getLogger(__name__)


class CapabilityConfig(BaseModel):
    aspect_ratio: str
    # Solo el modelo con alta resolución nativa recibe image_size
    image_size: Optional[QualityTier] = None


class TextPart(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class InlineDataPart(BaseModel):
    kind: Literal["inline_data"] = "inline_data"
    data: bytes
    mime_type: str = DEFAULT_IMAGE_MIME


Part = Annotated[Union[TextPart, InlineDataPart], Field(discriminator="kind")]


class GenerationResponse(BaseModel):
    candidates: list[list[Part]] = Field(default_factory=list)

    def parts(self):
        for candidate in self.candidates:
            yield from candidate

    def text(self) -> str:
        return "\n".join(part.text for part in self.parts() if isinstance(part, TextPart))


def first_inline_image(response: GenerationResponse) -> Optional[InlineDataPart]:
    """Return the first inline part carrying non-empty data, scanning in order."""
    for part in response.parts():
        if isinstance(part, InlineDataPart) and part.data:
            return part
    return None


class ImageBackend(Protocol):
    async def generate_content(
        self, model: str, segments: list[Segment], config: CapabilityConfig
    ) -> GenerationResponse: ...


def _decode_sdk_part(part) -> Optional[Part]:
    inline_data = getattr(part, "inline_data", None)
    if inline_data is not None:
        data = getattr(inline_data, "data", None) or b""
        if isinstance(data, str):
            data = base64.b64decode(data)
        mime_type = getattr(inline_data, "mime_type", None) or DEFAULT_IMAGE_MIME
        return InlineDataPart(data=data, mime_type=mime_type)
    text = getattr(part, "text", None)
    if text:
        return TextPart(text=text)
    return None


def decode_sdk_response(response) -> GenerationResponse:
    candidates = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        sdk_parts = getattr(content, "parts", None) or []
        parts = [p for p in (_decode_sdk_part(part) for part in sdk_parts) if p is not None]
        candidates.append(parts)
    return GenerationResponse(candidates=candidates)


def build_parts(segments: list[Segment]) -> list[types.Part]:
    parts = []
    for segment in segments:
        if isinstance(segment, ReferenceAsset):
            parts.append(types.Part.from_bytes(data=segment.raw_data, mime_type=segment.mime_type))
        else:
            parts.append(types.Part.from_text(text=segment))
    return parts


def build_sdk_config(config: CapabilityConfig) -> types.GenerateContentConfig:
    image_config_kwargs = {"aspect_ratio": config.aspect_ratio}
    if config.image_size is not None:
        image_config_kwargs["image_size"] = config.image_size.value
    return types.GenerateContentConfig(
        response_modalities=RESPONSE_MODALITIES,
        image_config=types.ImageConfig(**image_config_kwargs),
    )


class GeminiClient:

    def __init__(self, api_key: Optional[str] = None, client: Optional[genai.Client] = None):
        self._client = client or genai.Client(api_key=api_key)

    async def generate_content(
        self, model: str, segments: list[Segment], config: CapabilityConfig
    ) -> GenerationResponse:
        """
        Send one generation request and return the decoded response.

        Raises:
            BackendError: the SDK call failed for any reason.
        """
        contents = [types.Content(role="user", parts=build_parts(segments))]
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=build_sdk_config(config),
            )
        except Exception as e:
            logger.error("Generation request to %s failed: %s", model, e)
            raise BackendError(str(e)) from e
        return decode_sdk_response(response)
