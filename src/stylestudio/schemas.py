"""
Modelos de datos y validación

Define los esquemas Pydantic utilizados para:
- Describir una petición de generación y sus imágenes de referencia
- Representar el resultado devuelto al llamante
- Validar los datos de entrada en los endpoints
- Documentar automáticamente la API con OpenAPI
"""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from stylestudio.config import DEFAULT_MODEL


class GenerationMode(str, Enum):
    TEXT_TO_IMAGE = "text-to-image"
    IMAGE_TO_IMAGE = "image-to-image"


class QualityTier(str, Enum):
    """Coarse pixel-count class. Declaration order is the tier order."""

    Q1K = "1K"
    Q2K = "2K"
    Q4K = "4K"


class ReferenceAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_data: bytes
    mime_type: str = "image/png"

    @property
    def has_payload(self) -> bool:
        return len(self.raw_data) > 0


class ReferenceSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    asset: Optional[ReferenceAsset] = None

    @property
    def has_payload(self) -> bool:
        return self.asset is not None and self.asset.has_payload


class SlotArena:
    """
    Fixed-size ordered collection of reference slots keyed by a stable id.

    Replacing or clearing a slot swaps its record in place; the collection
    never grows or shrinks, so slot ids and positions stay bound to the UI.
    """

    def __init__(self, slot_ids: Iterable[int]):
        self._slots = [ReferenceSlot(id=slot_id) for slot_id in slot_ids]
        self._index = {slot.id: i for i, slot in enumerate(self._slots)}
        if len(self._index) != len(self._slots):
            raise ValueError("Slot ids must be unique")

    @classmethod
    def with_size(cls, size: int, first_id: int = 1) -> "SlotArena":
        return cls(range(first_id, first_id + size))

    @classmethod
    def from_slots(cls, slots: Iterable[ReferenceSlot]) -> "SlotArena":
        slots = list(slots)
        arena = cls(slot.id for slot in slots)
        for slot in slots:
            if slot.asset is not None:
                arena.replace(slot.id, slot.asset)
        return arena

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self):
        return iter(self._slots)

    def get(self, slot_id: int) -> ReferenceSlot:
        return self._slots[self._index[slot_id]]

    def replace(self, slot_id: int, asset: ReferenceAsset) -> ReferenceSlot:
        position = self._index[slot_id]
        self._slots[position] = ReferenceSlot(id=slot_id, asset=asset)
        return self._slots[position]

    def clear(self, slot_id: int) -> ReferenceSlot:
        position = self._index[slot_id]
        self._slots[position] = ReferenceSlot(id=slot_id)
        return self._slots[position]

    def slots(self) -> list[ReferenceSlot]:
        return list(self._slots)

    def present(self) -> list[ReferenceSlot]:
        return [slot for slot in self._slots if slot.has_payload]


class ModelDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    description: str = ""
    free: bool = False
    supports_native_high_res: bool = False


class GenerationRequest(BaseModel):
    mode: GenerationMode = GenerationMode.TEXT_TO_IMAGE
    model: str = DEFAULT_MODEL
    constant_prompt: str = ""
    positive_prompt: str = ""
    negative_prompt: str = ""
    characters: list[ReferenceSlot] = Field(default_factory=list)
    style_references: list[ReferenceSlot] = Field(default_factory=list)
    background: Optional[ReferenceAsset] = None
    preserve_background: bool = False
    quality: QualityTier = QualityTier.Q1K
    aspect_ratio: str = "1:1"


class Resolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_width: int
    target_height: int
    canonical_ratio: str

    @property
    def label(self) -> str:
        return f"{self.target_width}x{self.target_height}"


class Dimensions(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int
    height: int

    @property
    def label(self) -> str:
        return f"{self.width}x{self.height}"


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    resized_image: bytes
    resized_mime: str
    original_image: bytes
    original_mime: str
    original_resolution: Optional[Dimensions] = None
    target: Resolution
    model: str
    prompt: str = ""


# Esquemas de la API HTTP


class AssetPayload(BaseModel):
    # Data URL, base64 sin cabecera o URL http(s)
    data: str
    mime_type: str = "image/png"


class GenerateRequestBody(BaseModel):
    mode: GenerationMode = GenerationMode.TEXT_TO_IMAGE
    model: Optional[str] = None
    constant_prompt: str = ""
    positive_prompt: str
    negative_prompt: str = ""
    characters: list[Optional[AssetPayload]] = Field(default_factory=list)
    style_references: list[Optional[AssetPayload]] = Field(default_factory=list)
    background: Optional[AssetPayload] = None
    preserve_background: bool = False
    quality: QualityTier = QualityTier.Q1K
    aspect_ratio: str = "1:1"


class GenerateResponseBody(BaseModel):
    url: str
    original_url: str
    original_resolution: Optional[str] = None
    resolution: str
    canonical_ratio: str
    model: str
    quality: QualityTier
    aspect_ratio: str
    prompt: str
