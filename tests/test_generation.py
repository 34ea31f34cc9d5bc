import asyncio
from io import BytesIO

import pytest
from PIL import Image

from stylestudio.errors import BackendError, InvalidDimensions, NoImageInResponse
from stylestudio.gemini import GenerationResponse, InlineDataPart, TextPart
from stylestudio.schemas import (
    GenerationMode,
    GenerationRequest,
    QualityTier,
    ReferenceAsset,
    ReferenceSlot,
)
from stylestudio.services import generation, images


def output_size(img_bytes):
    return Image.open(BytesIO(img_bytes)).size


def character(slot_id, tag):
    return ReferenceSlot(id=slot_id, asset=ReferenceAsset(raw_data=tag.encode(), mime_type="image/jpeg"))


def test_end_to_end_image_to_image(make_png, image_response, fake_backend):
    backend = fake_backend(response=image_response(make_png(1024, 576)))
    background = ReferenceAsset(raw_data=b"bg", mime_type="image/png")
    request = GenerationRequest(
        mode=GenerationMode.IMAGE_TO_IMAGE,
        positive_prompt="two heroes on a bridge at dawn",
        characters=[character(1, "char-1"), character(2, "char-2")],
        background=background,
        preserve_background=True,
        quality=QualityTier.Q2K,
        aspect_ratio="16:9",
    )

    result = asyncio.run(generation.generate(request, backend))

    assert output_size(result.resized_image) == (3840, 2160)
    assert result.resized_mime == "image/png"
    assert result.original_resolution.label == "1024x576"
    assert result.target.label == "3840x2160"

    call = backend.calls[0]
    attachments = [s for s in call["segments"] if isinstance(s, ReferenceAsset)]
    assert [a.raw_data for a in attachments] == [b"char-1", b"char-2", b"bg"]
    text = "".join(s for s in call["segments"] if isinstance(s, str))
    assert "IDENTITY PRESERVATION" in text
    assert "EXACT background" in text


def test_baseline_model_gets_only_aspect_ratio(make_png, image_response, fake_backend):
    backend = fake_backend(response=image_response(make_png(64, 64)))
    request = GenerationRequest(
        model="gemini-2.0-flash-exp", positive_prompt="a fox", quality=QualityTier.Q2K, aspect_ratio="1:1"
    )
    asyncio.run(generation.generate(request, backend))
    config = backend.calls[0]["config"]
    assert config.aspect_ratio == "1:1"
    assert config.image_size is None


def test_native_model_gets_image_size(make_png, image_response, fake_backend):
    backend = fake_backend(response=image_response(make_png(64, 64)))
    request = GenerationRequest(
        model="gemini-3-pro-image-preview", positive_prompt="a fox", quality=QualityTier.Q4K, aspect_ratio="3:4"
    )
    asyncio.run(generation.generate(request, backend))
    call = backend.calls[0]
    assert call["model"] == "gemini-3-pro-image-preview"
    assert call["config"].aspect_ratio == "3:4"
    assert call["config"].image_size == QualityTier.Q4K


def test_custom_dimensions_sent_as_nearest_ratio(make_png, image_response, fake_backend):
    backend = fake_backend(response=image_response(make_png(1024, 576)))
    request = GenerationRequest(positive_prompt="a fox", aspect_ratio="1000x500")
    result = asyncio.run(generation.generate(request, backend))
    assert backend.calls[0]["config"].aspect_ratio == "16:9"
    assert output_size(result.resized_image) == (1000, 500)


def test_invalid_dimensions_fail_before_backend_call(fake_backend):
    backend = fake_backend()
    request = GenerationRequest(positive_prompt="a fox", aspect_ratio="0x500")
    with pytest.raises(InvalidDimensions):
        asyncio.run(generation.generate(request, backend))
    assert backend.calls == []


def test_text_only_response(text_response, fake_backend):
    backend = fake_backend(response=text_response)
    with pytest.raises(NoImageInResponse) as excinfo:
        asyncio.run(generation.generate(GenerationRequest(positive_prompt="a fox"), backend))
    assert excinfo.value.text == "I cannot draw that."


def test_empty_response(fake_backend):
    backend = fake_backend(response=GenerationResponse())
    with pytest.raises(NoImageInResponse):
        asyncio.run(generation.generate(GenerationRequest(positive_prompt="a fox"), backend))


def test_skips_empty_inline_parts(make_png, fake_backend):
    response = GenerationResponse(
        candidates=[
            [InlineDataPart(data=b"", mime_type="image/png"), TextPart(text="thinking")],
            [InlineDataPart(data=make_png(32, 32), mime_type="image/png")],
        ]
    )
    result = asyncio.run(generation.generate(GenerationRequest(positive_prompt="a fox"), fake_backend(response=response)))
    assert result.original_resolution.label == "32x32"


def test_backend_error_propagates(fake_backend):
    backend = fake_backend(error=BackendError("quota exceeded"))
    with pytest.raises(BackendError, match="quota exceeded"):
        asyncio.run(generation.generate(GenerationRequest(positive_prompt="a fox"), backend))
    assert len(backend.calls) == 1


def test_corrupt_payload_returns_original(image_response, fake_backend):
    backend = fake_backend(response=image_response(b"not really a png", mime_type="image/webp"))
    result = asyncio.run(generation.generate(GenerationRequest(positive_prompt="a fox"), backend))
    assert result.resized_image == result.original_image == b"not really a png"
    assert result.resized_mime == "image/webp"
    assert result.original_resolution is None


def test_resize_failure_is_not_fatal(make_png, image_response, fake_backend, monkeypatch):
    def broken_resize(*args, **kwargs):
        raise RuntimeError("out of memory")

    monkeypatch.setattr(images, "resize_image", broken_resize)
    original = make_png(50, 40)
    backend = fake_backend(response=image_response(original))
    result = asyncio.run(generation.generate(GenerationRequest(positive_prompt="a fox"), backend))
    assert result.resized_image == original
    assert result.original_resolution.label == "50x40"


def test_result_records_prompt_and_model(make_png, image_response, fake_backend):
    backend = fake_backend(response=image_response(make_png(16, 16)))
    request = GenerationRequest(model="imagen-3.0-generate-002", positive_prompt="a fox")
    result = asyncio.run(generation.generate(request, backend))
    assert result.prompt == "a fox"
    assert result.model == "imagen-3.0-generate-002"


def test_oversized_payload_returns_original(make_png, image_response, fake_backend, monkeypatch):
    original = make_png(50, 50)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    backend = fake_backend(response=image_response(original))
    result = asyncio.run(generation.generate(GenerationRequest(positive_prompt="a fox"), backend))
    assert result.resized_image == result.original_image == original
    assert result.original_resolution is None
