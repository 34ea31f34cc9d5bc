import base64
import binascii

import requests

from stylestudio.config import REMOTE_FETCH_TIMEOUT


def is_remote_url(data):
    """
    Check if the provided data is a remote http(s) URL
    """
    return data.startswith(("http://", "https://"))


def get_image_bytes_from_url(url):
    """
    Fetch image bytes from a URL.
    """
    resp = requests.get(url, timeout=REMOTE_FETCH_TIMEOUT)
    if resp.status_code != 200:
        raise ValueError(f"Failed to fetch image from {url}")
    return resp.content


def remove_b64_header(data):
    """
    Remove the base64 header from a data URL.
    """
    if data.startswith("data:image/"):
        img_b64 = data.split(",", 1)[-1]
        img_b64 = "".join(img_b64.split())
        padding = len(img_b64) % 4
        if padding:
            img_b64 += "=" * (4 - padding)
        return img_b64
    return data


def mime_from_data_url(data, default="image/png"):
    """
    Extract the MIME type from a data URL header, if any.
    """
    if data.startswith("data:") and ";" in data:
        return data[len("data:"):data.index(";")] or default
    return default


def decode_image_data(data):
    """
    Decode a data URL, raw base64 string or http(s) URL into image bytes.
    """
    if is_remote_url(data):
        return get_image_bytes_from_url(data)
    try:
        return base64.b64decode(remove_b64_header(data), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e


def to_data_url(img_bytes, mime_type="image/png"):
    return f"data:{mime_type};base64,{base64.b64encode(img_bytes).decode('ascii')}"
