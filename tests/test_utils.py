import base64

import pytest

from stylestudio import utils
from stylestudio.utils import (
    decode_image_data,
    is_remote_url,
    mime_from_data_url,
    remove_b64_header,
    to_data_url,
)


def test_is_remote_url():
    assert is_remote_url("http://example.com/image.png")
    assert is_remote_url("https://example.com/image.png")
    assert not is_remote_url("ftp://example.com/image.png")
    assert not is_remote_url("example.com/image.png")


def test_remove_b64_header():
    data_url = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAUA..."
    b64_no_padding = "iVBORw0KGgoAAAANSUhEUgAAAAUA..."
    result = remove_b64_header(data_url)
    assert result.startswith(b64_no_padding)
    assert len(result) % 4 == 0

    non_data_url = "https://example.com/image.png"
    assert remove_b64_header(non_data_url) == non_data_url


def test_mime_from_data_url():
    assert mime_from_data_url("data:image/jpeg;base64,AAAA") == "image/jpeg"
    assert mime_from_data_url("AAAA", default="image/webp") == "image/webp"


def test_decode_image_data_round_trip():
    raw = b"\x89PNG fake payload"
    assert decode_image_data(to_data_url(raw)) == raw
    assert decode_image_data(base64.b64encode(raw).decode()) == raw


def test_decode_image_data_invalid_base64():
    with pytest.raises(ValueError):
        decode_image_data("this is not base64!!")


def test_decode_image_data_fetches_remote(monkeypatch):
    class FakeResponse:
        status_code = 200
        content = b"remote bytes"

    requested = []

    def fake_get(url, timeout):
        requested.append(url)
        return FakeResponse()

    monkeypatch.setattr(utils.requests, "get", fake_get)
    assert decode_image_data("https://example.com/ref.png") == b"remote bytes"
    assert requested == ["https://example.com/ref.png"]


def test_get_image_bytes_from_url_error(monkeypatch):
    class FakeResponse:
        status_code = 404
        content = b""

    monkeypatch.setattr(utils.requests, "get", lambda url, timeout: FakeResponse())
    with pytest.raises(ValueError):
        utils.get_image_bytes_from_url("https://example.com/missing.png")


def test_to_data_url():
    assert to_data_url(b"abc", "image/jpeg") == "data:image/jpeg;base64,YWJj"
