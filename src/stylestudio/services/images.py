"""
Servicios de procesamiento de imágenes

Proporciona funcionalidad especializada en manipular y transformar las
imágenes devueltas por el backend de generación.

Características:
- Lectura de las dimensiones originales
- Redimensionamiento exacto a la resolución objetivo (crop, fit o stretch)
- Codificación PNG sin pérdidas
"""

from enum import Enum
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from stylestudio.errors import DecodeError
from stylestudio.schemas import Dimensions


class ResizeMode(str, Enum):
    CROP = "crop"
    FIT = "fit"
    STRETCH = "stretch"


RESAMPLE = Image.Resampling.LANCZOS
LETTERBOX_COLOR = (0, 0, 0, 255)


def _open_image(img_bytes: bytes) -> Image.Image:
    try:
        img = Image.open(BytesIO(img_bytes))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e
    return img


def _normalize_mode(img: Image.Image) -> Image.Image:
    if img.mode in ("RGB", "RGBA"):
        return img
    if img.mode in ("LA", "PA") or "transparency" in img.info:
        return img.convert("RGBA")
    return img.convert("RGB")


def _encode_png(img: Image.Image) -> bytes:
    output_buffer = BytesIO()
    img.save(output_buffer, format="PNG")
    return output_buffer.getvalue()


def get_image_dimensions(img_bytes: bytes) -> Dimensions:
    img = _open_image(img_bytes)
    return Dimensions(width=img.width, height=img.height)


def _crop(img: Image.Image, target_width: int, target_height: int) -> Image.Image:
    src_width, src_height = img.size
    src_ratio = src_width / src_height
    target_ratio = target_width / target_height

    if src_ratio > target_ratio:
        # Fuente más ancha: se recortan los laterales
        crop_width = src_height * target_ratio
        left = (src_width - crop_width) / 2
        box = (left, 0, left + crop_width, src_height)
    else:
        # Fuente más alta: se recortan arriba y abajo
        crop_height = src_width / target_ratio
        top = (src_height - crop_height) / 2
        box = (0, top, src_width, top + crop_height)

    return img.resize((target_width, target_height), RESAMPLE, box=box)


def _fit(img: Image.Image, target_width: int, target_height: int) -> Image.Image:
    src_width, src_height = img.size
    src_ratio = src_width / src_height
    target_ratio = target_width / target_height

    if src_ratio > target_ratio:
        draw_width = target_width
        draw_height = max(1, round(target_width / src_ratio))
    else:
        draw_width = max(1, round(target_height * src_ratio))
        draw_height = target_height

    scaled = img.convert("RGBA").resize((draw_width, draw_height), RESAMPLE)
    canvas = Image.new("RGBA", (target_width, target_height), LETTERBOX_COLOR)
    offset = ((target_width - draw_width) // 2, (target_height - draw_height) // 2)
    canvas.alpha_composite(scaled, dest=offset)
    return canvas if img.mode == "RGBA" else canvas.convert("RGB")


def resize_image(
    img_bytes: bytes,
    target_width: int,
    target_height: int,
    mode: ResizeMode = ResizeMode.CROP,
) -> bytes:
    """
    Resize an encoded image to exactly ``target_width`` x ``target_height``.

    ``crop`` fills the frame and trims the excess symmetrically, ``fit``
    letterboxes with black bars, ``stretch`` ignores the source ratio.
    The result is always PNG encoded.

    Raises:
        DecodeError: the input is not a decodable raster image.
        ValueError: the target dimensions are not positive.
    """
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Invalid target size {target_width}x{target_height}")

    img = _normalize_mode(_open_image(img_bytes))
    mode = ResizeMode(mode)

    if mode == ResizeMode.CROP:
        resized_img = _crop(img, target_width, target_height)
    elif mode == ResizeMode.FIT:
        resized_img = _fit(img, target_width, target_height)
    else:
        resized_img = img.resize((target_width, target_height), RESAMPLE)

    return _encode_png(resized_img)
