"""
Registro de modelos de generación

Lista estática de los modelos soportados. La capacidad de generar
resoluciones altas de forma nativa es un campo del descriptor, de modo que
elegir la configuración de un modelo es una búsqueda y no una comparación
de cadenas.
"""

import logging

from stylestudio.schemas import ModelDescriptor

logger = logging.getLogger(__name__)

MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        id="gemini-2.0-flash-exp",
        display_name="Gemini 2.0 Flash",
        description="Fast, supports style refs",
        free=True,
    ),
    ModelDescriptor(
        id="gemini-2.0-flash-preview-image-generation",
        display_name="Gemini 2.0 Flash Preview",
        description="Preview image gen",
        free=True,
    ),
    ModelDescriptor(
        id="imagen-3.0-generate-002",
        display_name="Imagen 3.0",
        description="High quality, no style refs",
    ),
    ModelDescriptor(
        id="gemini-3-pro-image-preview",
        display_name="Gemini 3 Pro",
        description="Latest pro model for images",
        supports_native_high_res=True,
    ),
)

_BY_ID = {model.id: model for model in MODELS}

if sum(model.supports_native_high_res for model in MODELS) != 1:
    raise RuntimeError("Exactly one registered model must support native high resolution")


def list_models() -> list[ModelDescriptor]:
    return list(MODELS)


def get_model(model_id: str) -> ModelDescriptor:
    """
    Look up a model descriptor.

    Unknown ids are still usable; they are treated as baseline models.
    """
    model = _BY_ID.get(model_id)
    if model is None:
        logger.warning("Unknown model %s, treating it as a baseline model", model_id)
        return ModelDescriptor(id=model_id, display_name=model_id)
    return model
