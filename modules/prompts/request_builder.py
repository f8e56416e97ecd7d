"""Assemble outbound generation requests from the current selection.

Everything here is pure: the same selection, base image and edit text always
produce the same attachments in the same order and byte-identical
instructions. Image ``IMAGE_0`` is always the subject; garments follow as
``IMAGE_1`` onwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from modules.assets.image_asset import ImageAsset
from modules.prompts.options import BackgroundOption, FitOption, PoseOption, SelectionState


class OperationKind(str, Enum):
    """Kinds of remote operations."""

    GENERATE = "generate"
    ENHANCE = "enhance"
    SUGGEST = "suggest"


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """A single outbound call: ordered image attachments plus instruction text."""

    kind: OperationKind
    attachments: Tuple[ImageAsset, ...]
    instructions: str
    progress_label: Optional[str] = None


FIT_INSTRUCTIONS: dict[FitOption, str] = {
    FitOption.SLIM: "Give the clothing a SLIM fit that follows the contours of the SUBJECT's body.",
    FitOption.REGULAR: "Give the clothing a REGULAR, classic fit.",
    FitOption.LOOSE: "Give the clothing a LOOSE fit with a relaxed drape.",
    FitOption.BAGGY: "Give the clothing a BAGGY fit so it looks very loose and roomy.",
    FitOption.OVERSIZED: "Give the clothing an OVERSIZED fit with exaggerated, fashion-forward proportions.",
}

SUBJECT_LOCK = (
    "IDENTITY LOCK (highest priority): IMAGE_0 shows the SUBJECT. Their face, body, hair "
    "and skin tone are the only source of truth and must not be altered in any way. "
    "Every other image is a clothing reference; any person shown in those images is a "
    "mannequin whose face, body and identity must be ignored. The final image must show "
    "the unaltered person from IMAGE_0."
)

KEEP_POSE = "Keep the SUBJECT's original pose from IMAGE_0."
KEEP_CLOTHING = "Do not change the SUBJECT's clothing."
KEEP_BACKGROUND = "Keep the original background from IMAGE_0."
NO_CUSTOM_EDIT = "Make no other changes."

ENHANCEMENT_INSTRUCTIONS = "\n".join(
    [
        "TASK: PHOTO FINISHING. Produce a higher quality version of IMAGE_0.",
        "1. NOISE REDUCTION: remove luminance and colour noise while keeping edges and fine texture.",
        "2. DYNAMIC RANGE: recover highlight and shadow detail without a flat or artificial HDR look.",
        "3. TONE AND COLOUR: neutralise the white balance, add gentle contrast and slightly richer colour; "
        "skin tones must stay natural.",
        "4. SHARPENING: raise micro-contrast in fabric, hair and surroundings without halos or artifacts.",
        "CONSTRAINTS (non-negotiable):",
        "- SUBJECT LOCK: do not alter the subject's identity, facial features, expression, skin texture or age.",
        "- CONTENT LOCK: do not change the outfit, its colours, its fit or any accessory.",
        "- COMPOSITION LOCK: background, pose and framing stay exactly as they are.",
        "Return only the enhanced photograph.",
    ]
)

SUGGESTION_INSTRUCTIONS = "\n".join(
    [
        "You are a fashion stylist. IMAGE_0 shows a person; the remaining images show the outfit "
        "they are trying on.",
        "Study the person's overall look and the outfit's style, palette, materials and silhouette.",
        "Suggest 3 to 5 short, specific accessories that would elevate this outfit "
        '(for example "a thin gold chain with a small round pendant" rather than "a necklace").',
        'Respond with a JSON object containing a single key "suggestions" whose value is an array of strings. '
        "Do not include any other text.",
    ]
)

PROGRESS_OUTFIT = "Simulating your new outfit..."
PROGRESS_BACKGROUND = "Compositing new background..."
PROGRESS_CUSTOM = "Executing custom refinements..."
PROGRESS_DEFAULT = "Generating your image..."
PROGRESS_ENHANCE = "Applying photo enhancements..."


def _clothing_instruction(has_garments: bool) -> str:
    if has_garments:
        return (
            "Extract every piece of clothing and every accessory from IMAGE_1 and any later images "
            "and place them photorealistically on the SUBJECT. Disregard the people in those images."
        )
    return KEEP_CLOTHING


def _pose_instruction(selection: SelectionState) -> str:
    if selection.pose is PoseOption.REPLICATE and selection.has_garments:
        return "Make the SUBJECT adopt the pose shown in IMAGE_1."
    if selection.wants_custom_pose:
        return f'Make the SUBJECT adopt this pose: "{selection.custom_pose.strip()}".'
    return KEEP_POSE


def _background_instruction(selection: SelectionState, background_edit: str) -> str:
    if selection.background is BackgroundOption.OUTFIT:
        if selection.has_garments:
            return (
                "Replace the background with the background of IMAGE_1 and composite the SUBJECT into it, "
                "matching its lighting and perspective."
            )
        return KEEP_BACKGROUND
    scene = background_edit.strip()
    if scene:
        return (
            f'Replace the background with a new photorealistic scene: "{scene}". '
            "Match the lighting on the SUBJECT to the new scene."
        )
    return KEEP_BACKGROUND


def _custom_instruction(custom_edit: str) -> str:
    text = custom_edit.strip()
    if text:
        return f'Apply this final change: "{text}".'
    return NO_CUSTOM_EDIT


def progress_label(selection: SelectionState, custom_edit: str = "", background_edit: str = "") -> str:
    """Short human-readable description of what a generate call is about to do."""
    if selection.has_garments:
        return PROGRESS_OUTFIT
    if background_edit.strip() or selection.background is BackgroundOption.OUTFIT:
        return PROGRESS_BACKGROUND
    if custom_edit.strip():
        return PROGRESS_CUSTOM
    return PROGRESS_DEFAULT


def build_tryon_request(
    selection: SelectionState,
    base_image: ImageAsset,
    custom_edit: str = "",
    background_edit: str = "",
) -> GenerationRequest:
    """Build the virtual try-on request for ``base_image``.

    Garments are taken from ``selection.garment_images``; pass a selection
    without garments to edit an already-generated image in place.
    """
    steps = [
        f"1. IDENTIFY SUBJECT: {SUBJECT_LOCK}",
        f"2. APPLY CLOTHING: {_clothing_instruction(selection.has_garments)}",
        f"3. APPLY POSE: {_pose_instruction(selection)}",
        f"4. APPLY FIT: {FIT_INSTRUCTIONS[selection.fit]}",
        f"5. APPLY BACKGROUND: {_background_instruction(selection, background_edit)}",
        f"6. APPLY CUSTOM EDITS: {_custom_instruction(custom_edit)}",
        "7. RENDER: output one photorealistic image in which the person is the SUBJECT from IMAGE_0.",
    ]
    instructions = "TASK: VIRTUAL TRY-ON PHOTO EDIT\n" + "\n".join(steps)
    return GenerationRequest(
        kind=OperationKind.GENERATE,
        attachments=(base_image, *selection.garment_images),
        instructions=instructions,
        progress_label=progress_label(selection, custom_edit, background_edit),
    )


def build_enhancement_request(image: ImageAsset) -> GenerationRequest:
    return GenerationRequest(
        kind=OperationKind.ENHANCE,
        attachments=(image,),
        instructions=ENHANCEMENT_INSTRUCTIONS,
        progress_label=PROGRESS_ENHANCE,
    )


def build_suggestion_request(
    base_image: ImageAsset, garment_images: Sequence[ImageAsset]
) -> GenerationRequest:
    return GenerationRequest(
        kind=OperationKind.SUGGEST,
        attachments=(base_image, *garment_images),
        instructions=SUGGESTION_INSTRUCTIONS,
    )
