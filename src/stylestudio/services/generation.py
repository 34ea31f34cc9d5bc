"""
Servicios de generación de imágenes

Implementa el ciclo completo de una petición de generación, actuando como
capa intermedia entre los endpoints de la API y el cliente Gemini.

Responsabilidades:
- Resolver la resolución objetivo y la relación de aspecto para el backend
- Elegir la configuración de capacidades según el modelo
- Enviar el documento de instrucciones y extraer la imagen de la respuesta
- Redimensionar el resultado sin que un fallo de redimensionado haga fallar
  la generación

No hay exclusión mutua: dos invocaciones solapadas avanzan por separado, y
serializarlas es responsabilidad del llamante.
"""

import asyncio
import logging
from typing import Optional

from stylestudio.errors import DecodeError, NoImageInResponse
from stylestudio.gemini import CapabilityConfig, ImageBackend, first_inline_image
from stylestudio.prompting import compose
from stylestudio.registry import get_model
from stylestudio.resolution import backend_aspect_ratio, resolve
from stylestudio.schemas import Dimensions, GenerationRequest, GenerationResult, ModelDescriptor
from stylestudio.services import images
from stylestudio.services.images import ResizeMode

logger = logging.getLogger(__name__)


def build_capability_config(
    model: ModelDescriptor, aspect_ratio: str, request: GenerationRequest
) -> CapabilityConfig:
    if model.supports_native_high_res:
        return CapabilityConfig(aspect_ratio=aspect_ratio, image_size=request.quality)
    return CapabilityConfig(aspect_ratio=aspect_ratio)


def _read_dimensions(img_bytes: bytes) -> Optional[Dimensions]:
    try:
        return images.get_image_dimensions(img_bytes)
    except DecodeError as e:
        logger.warning("Could not read original resolution: %s", e)
        return None


async def generate(request: GenerationRequest, client: ImageBackend) -> GenerationResult:
    """
    Run one request/response cycle against the generation backend.

    Raises:
        InvalidDimensions: the custom aspect ratio is invalid (before any
            network call).
        BackendError: the backend call failed.
        NoImageInResponse: the backend returned no inline image data.
    """
    target = resolve(request.quality, request.aspect_ratio)
    aspect_ratio = backend_aspect_ratio(request.aspect_ratio)
    if aspect_ratio != request.aspect_ratio:
        logger.info("Aspect %s mapped to %s for the backend", request.aspect_ratio, aspect_ratio)

    model = get_model(request.model)
    config = build_capability_config(model, aspect_ratio, request)
    prompt = compose(request, target)

    logger.info(
        "Generating image model=%s aspect_ratio=%s image_size=%s",
        model.id,
        aspect_ratio,
        config.image_size.value if config.image_size else f"{request.quality.value} (client resize)",
    )
    response = await client.generate_content(model.id, prompt.segments, config)

    image_part = first_inline_image(response)
    if image_part is None:
        text = response.text()
        raise NoImageInResponse(
            "No image data found in response - model may have returned text only",
            text=text,
        )

    original_image = image_part.data
    original_resolution = await asyncio.to_thread(_read_dimensions, original_image)
    if original_resolution is not None:
        logger.info("Original resolution: %s", original_resolution.label)

    try:
        resized_image = await asyncio.to_thread(
            images.resize_image,
            original_image,
            target.target_width,
            target.target_height,
            ResizeMode.CROP,
        )
        resized_mime = "image/png"
        logger.info("Image resized to %s", target.label)
    except Exception as e:
        logger.warning("Resize failed, returning original: %s", e)
        resized_image = original_image
        resized_mime = image_part.mime_type

    return GenerationResult(
        resized_image=resized_image,
        resized_mime=resized_mime,
        original_image=original_image,
        original_mime=image_part.mime_type,
        original_resolution=original_resolution,
        target=target,
        model=model.id,
        prompt=request.positive_prompt,
    )
