"""
Composición del documento de instrucciones

Construye, a partir de los componentes opcionales de una petición, un único
documento de texto con las imágenes de referencia intercaladas. Las
secciones siguen un orden de prioridad fijo:

1. Referencia de estilo (solo la primera)
2. Guía de estilo constante (solo sin referencia de estilo)
3. Preservación de identidad de personajes (image-to-image)
4. Referencia de fondo (image-to-image)
5. Descripción de la escena
6. Requisitos de calidad
7. Restricciones negativas
8. Instrucción final
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from stylestudio.resolution import resolve
from stylestudio.schemas import (
    GenerationMode,
    GenerationRequest,
    QualityTier,
    ReferenceAsset,
    Resolution,
    SlotArena,
)

logger = logging.getLogger(__name__)

MAJOR_RULE = "=" * 50
MINOR_RULE = "-" * 50

QUALITY_BOOST = {
    QualityTier.Q1K: "Full HD resolution ({resolution}), crisp details, professional quality",
    QualityTier.Q2K: (
        "4K/2K ultra-high resolution ({resolution}), pixel-perfect sharpness, "
        "maximum detail, professional quality"
    ),
    QualityTier.Q4K: (
        "4K ultra-high resolution ({resolution}), pixel-perfect sharpness, "
        "maximum detail, professional quality"
    ),
}

QUALITY_FLOURISH = (
    "cinematic volumetric lighting, ray-traced ambient occlusion, masterpiece "
    "composition, award-winning quality, trending on ArtStation"
)

Segment = Union[str, ReferenceAsset]


@dataclass
class ComposedPrompt:
    segments: list[Segment] = field(default_factory=list)

    @property
    def attachments(self) -> list[ReferenceAsset]:
        return [s for s in self.segments if isinstance(s, ReferenceAsset)]

    @property
    def instruction_text(self) -> str:
        return "".join(s for s in self.segments if isinstance(s, str))

    def write(self, text: str) -> None:
        if self.segments and isinstance(self.segments[-1], str):
            self.segments[-1] += text
        else:
            self.segments.append(text)

    def attach(self, asset: ReferenceAsset) -> None:
        self.segments.append(asset)

    def banner(self, title: str, rule: str = MAJOR_RULE) -> None:
        self.write(f"{rule}\n[{title}]\n{rule}\n\n")


def _style_section(doc: ComposedPrompt, style: ReferenceAsset) -> None:
    doc.banner("CRITICAL - STYLE REFERENCE - ABSOLUTE HIGHEST PRIORITY")
    doc.write("MANDATORY STYLE MATCHING INSTRUCTIONS\n\n")
    doc.write(
        "You MUST analyze and EXACTLY replicate the following visual elements "
        "from the reference image. These instructions override every other "
        "instruction in this document:\n\n"
    )
    doc.write(
        "1. ART STYLE: Copy the exact rendering technique, whether it's 3D, 2D, painterly, "
        "cel-shaded, realistic, etc.\n"
        "2. COLOR PALETTE: Match the exact color grading, saturation levels, and color harmony.\n"
        "3. LIGHTING: Replicate the lighting setup - direction, softness, rim lights, "
        "ambient occlusion.\n"
        "4. MATERIAL/TEXTURE: Match how surfaces are rendered - skin subsurface scattering, "
        "fabric texture, metallic/matte finishes.\n"
        "5. LINE WORK: If present, match the line weight, style, and outline characteristics.\n"
        "6. SHADING: Copy the shading technique - soft gradients, hard cel-shading, "
        "cross-hatching, etc.\n"
        "7. ATMOSPHERE: Match the mood, tone, and overall feeling of the reference.\n\n"
    )
    doc.attach(style)
    doc.write("[STYLE REFERENCE IMAGE ATTACHED ABOVE]\n\n")
    doc.write(
        "CRITICAL: The generated image MUST be INDISTINGUISHABLE in art style from the reference.\n"
        "CRITICAL: Someone looking at both images should think they were made by the SAME artist.\n"
        "CRITICAL: DO NOT deviate from this style under any circumstances.\n\n"
    )


def _constant_section(doc: ComposedPrompt, constant_prompt: str) -> None:
    doc.banner("STYLE GUIDELINES - HIGH PRIORITY")
    doc.write("Follow these style instructions precisely:\n\n")
    doc.write(constant_prompt + "\n\n")


def _identity_section(doc: ComposedPrompt, characters: list[ReferenceAsset]) -> None:
    doc.banner("SOURCE CHARACTERS - IDENTITY PRESERVATION", MINOR_RULE)
    doc.write(
        "Transform these characters into the defined style while STRICTLY maintaining:\n"
        "- Facial features and proportions\n"
        "- Hair color, style, and length\n"
        "- Eye color and shape\n"
        "- Distinctive physical traits\n"
        "- Clothing colors and key design elements\n\n"
    )
    for index, character in enumerate(characters, start=1):
        doc.attach(character)
        doc.write(f"Character {index}: [See attached image above]\n")
    doc.write("\n")


def _background_section(doc: ComposedPrompt, background: ReferenceAsset, preserve: bool) -> None:
    doc.attach(background)
    doc.write("[BACKGROUND REFERENCE]\n")
    if preserve:
        doc.write(
            "Use this EXACT background composition, layout, and environment. "
            "[See attached image above]\n\n"
        )
    else:
        doc.write(
            "Use this only as inspiration for lighting, atmosphere, and mood. "
            "[See attached image above]\n\n"
        )


def _scene_section(doc: ComposedPrompt, positive_prompt: str) -> None:
    doc.banner("SCENE DESCRIPTION - CONTENT TO GENERATE", MINOR_RULE)
    doc.write("Generate the following scene/subject:\n\n")
    doc.write(f">>> {positive_prompt} <<<\n\n")


def _quality_section(
    doc: ComposedPrompt, quality: QualityTier, resolution: Resolution, has_style: bool
) -> None:
    boost = QUALITY_BOOST[quality].format(resolution=resolution.label)
    doc.write("[QUALITY REQUIREMENTS]\n")
    doc.write(f"Target Resolution: {resolution.label}\n")
    if has_style:
        doc.write(f"{boost} - but ALWAYS maintain the reference art style above all else\n\n")
    else:
        doc.write(f"{boost}, {QUALITY_FLOURISH}\n\n")


def _negative_section(doc: ComposedPrompt, negative_prompt: str) -> None:
    doc.banner("STRICTLY AVOID - DO NOT INCLUDE ANY OF THESE")
    doc.write(f"NEVER generate: {negative_prompt}\n\n")


def _closing_section(doc: ComposedPrompt, has_style: bool) -> None:
    doc.banner("FINAL OUTPUT INSTRUCTION")
    doc.write("Generate a SINGLE high-quality image that:\n")
    if has_style:
        doc.write(
            "1. PERFECTLY matches the art style of the reference image (THIS IS THE #1 PRIORITY)\n"
            "2. Depicts the scene/content described above\n"
            "3. Maintains consistent quality throughout\n"
        )
    else:
        doc.write(
            "1. Follows all style guidelines precisely\n"
            "2. Depicts the scene/content described above\n"
            "3. Achieves the highest possible quality\n"
        )
    doc.write("\nBEGIN GENERATION NOW.")


def compose(request: GenerationRequest, resolution: Optional[Resolution] = None) -> ComposedPrompt:
    """
    Assemble the instruction document for a generation request.

    Args:
        request: The populated generation request.
        resolution: Pre-computed target resolution. Resolved from the
            request's quality and aspect ratio when omitted.

    Returns:
        A ``ComposedPrompt`` whose ``attachments`` appear in the same order as
        the sections that reference them in ``instruction_text``.

    Raises:
        InvalidDimensions: the request's custom aspect ratio is invalid.
    """
    if resolution is None:
        resolution = resolve(request.quality, request.aspect_ratio)

    doc = ComposedPrompt()

    styles = [slot.asset for slot in SlotArena.from_slots(request.style_references).present()]
    has_style = len(styles) > 0

    if has_style:
        _style_section(doc, styles[0])
        if len(styles) > 1:
            logger.info(
                "Using only the first style reference, %d additional refs ignored",
                len(styles) - 1,
            )
    elif request.constant_prompt:
        _constant_section(doc, request.constant_prompt)

    if request.mode == GenerationMode.IMAGE_TO_IMAGE:
        characters = [slot.asset for slot in SlotArena.from_slots(request.characters).present()]
        if characters:
            _identity_section(doc, characters)
        if request.background is not None and request.background.has_payload:
            _background_section(doc, request.background, request.preserve_background)

    _scene_section(doc, request.positive_prompt)
    _quality_section(doc, request.quality, resolution, has_style)

    if request.negative_prompt:
        _negative_section(doc, request.negative_prompt)

    _closing_section(doc, has_style)
    return doc
