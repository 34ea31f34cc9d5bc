import asyncio
import logging
from typing import Optional

import requests
from fastapi import APIRouter, Depends, HTTPException

from stylestudio.config import DEFAULT_MODEL
from stylestudio.deps import get_gemini_client
from stylestudio.errors import BackendError, InvalidDimensions, NoImageInResponse
from stylestudio.gemini import ImageBackend
from stylestudio.registry import list_models
from stylestudio.schemas import (
    AssetPayload,
    GenerateRequestBody,
    GenerateResponseBody,
    GenerationRequest,
    ModelDescriptor,
    ReferenceAsset,
    ReferenceSlot,
    SlotArena,
)
from stylestudio.services.generation import generate
from stylestudio.utils import decode_image_data, mime_from_data_url, to_data_url

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_asset(payload: Optional[AssetPayload], field: str) -> Optional[ReferenceAsset]:
    if payload is None or not payload.data:
        return None
    try:
        raw_data = decode_image_data(payload.data)
    except (ValueError, requests.RequestException) as e:
        raise HTTPException(status_code=400, detail=f"Invalid image for {field}: {e}") from e
    mime_type = mime_from_data_url(payload.data, default=payload.mime_type)
    return ReferenceAsset(raw_data=raw_data, mime_type=mime_type)


def _to_slots(payloads: list[Optional[AssetPayload]], field: str) -> list[ReferenceSlot]:
    arena = SlotArena.with_size(len(payloads))
    for slot_id, payload in enumerate(payloads, start=1):
        asset = _to_asset(payload, f"{field}[{slot_id}]")
        if asset is None:
            arena.clear(slot_id)
        else:
            arena.replace(slot_id, asset)
    return arena.slots()


def build_generation_request(req: GenerateRequestBody) -> GenerationRequest:
    return GenerationRequest(
        mode=req.mode,
        model=req.model or DEFAULT_MODEL,
        constant_prompt=req.constant_prompt,
        positive_prompt=req.positive_prompt,
        negative_prompt=req.negative_prompt,
        characters=_to_slots(req.characters, "characters"),
        style_references=_to_slots(req.style_references, "style_references"),
        background=_to_asset(req.background, "background"),
        preserve_background=req.preserve_background,
        quality=req.quality,
        aspect_ratio=req.aspect_ratio,
    )


@router.post("/generate", response_model=GenerateResponseBody)
async def generate_image(
    req: GenerateRequestBody, client: ImageBackend = Depends(get_gemini_client)
):
    """Generate one image and return it resized to the requested resolution."""
    # Los assets remotos se descargan con requests, fuera del bucle de eventos
    request = await asyncio.to_thread(build_generation_request, req)
    try:
        result = await generate(request, client)
    except InvalidDimensions as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except NoImageInResponse as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except BackendError as e:
        raise HTTPException(status_code=502, detail=f"Generation backend error: {e}") from e

    return GenerateResponseBody(
        url=to_data_url(result.resized_image, result.resized_mime),
        original_url=to_data_url(result.original_image, result.original_mime),
        original_resolution=result.original_resolution.label if result.original_resolution else None,
        resolution=result.target.label,
        canonical_ratio=result.target.canonical_ratio,
        model=result.model,
        quality=request.quality,
        aspect_ratio=request.aspect_ratio,
        prompt=result.prompt,
    )


@router.get("/models", response_model=list[ModelDescriptor])
async def get_models():
    """Lists the image generation models the studio can dispatch to."""
    return list_models()


def get_router():
    return router
