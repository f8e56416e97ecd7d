"""User-selectable try-on options."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from modules.assets.image_asset import ImageAsset


class PoseOption(str, Enum):
    """How the subject should be posed."""

    ORIGINAL = "original"
    REPLICATE = "replicate"
    CUSTOM = "custom"


class FitOption(str, Enum):
    """How loosely the applied garments should sit."""

    SLIM = "slim"
    REGULAR = "regular"
    LOOSE = "loose"
    BAGGY = "baggy"
    OVERSIZED = "oversized"


class BackgroundOption(str, Enum):
    """Where the background comes from."""

    CUSTOM = "custom"
    OUTFIT = "outfit"


def _coerce(enum_type, value, default):
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class SelectionState:
    """Unversioned inputs chosen by the user.

    Instances are immutable; editing a selection means building a new one with
    :func:`dataclasses.replace` (see the ``with_*`` helpers).
    """

    person_image: Optional[ImageAsset] = None
    garment_images: Tuple[ImageAsset, ...] = ()
    pose: PoseOption = PoseOption.ORIGINAL
    custom_pose: str = ""
    fit: FitOption = FitOption.REGULAR
    background: BackgroundOption = BackgroundOption.CUSTOM

    @property
    def has_garments(self) -> bool:
        return len(self.garment_images) > 0

    @property
    def wants_custom_pose(self) -> bool:
        return self.pose is PoseOption.CUSTOM and bool(self.custom_pose.strip())

    def with_pose(self, pose: PoseOption | str, custom_pose: Optional[str] = None) -> "SelectionState":
        new_pose = _coerce(PoseOption, pose, PoseOption.ORIGINAL)
        text = self.custom_pose if custom_pose is None else custom_pose
        return replace(self, pose=new_pose, custom_pose=text)

    def with_fit(self, fit: FitOption | str) -> "SelectionState":
        return replace(self, fit=_coerce(FitOption, fit, FitOption.REGULAR))

    def with_background(self, background: BackgroundOption | str) -> "SelectionState":
        return replace(self, background=_coerce(BackgroundOption, background, BackgroundOption.CUSTOM))

    def without_garments(self) -> "SelectionState":
        """Drop every garment image for a garment-free request."""
        return replace(self, garment_images=())
