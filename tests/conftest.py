from io import BytesIO

import pytest
from PIL import Image

from stylestudio.gemini import GenerationResponse, InlineDataPart, TextPart


def _make_png(width, height, color=(255, 0, 0)):
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeBackend:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, model, segments, config):
        self.calls.append({"model": model, "segments": segments, "config": config})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def make_png():
    return _make_png


@pytest.fixture
def image_response():
    def build(img_bytes, mime_type="image/png"):
        return GenerationResponse(
            candidates=[[TextPart(text="Here is your image"), InlineDataPart(data=img_bytes, mime_type=mime_type)]]
        )

    return build


@pytest.fixture
def text_response():
    return GenerationResponse(candidates=[[TextPart(text="I cannot draw that.")]])


@pytest.fixture
def fake_backend():
    return FakeBackend
