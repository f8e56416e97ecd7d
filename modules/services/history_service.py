"""Linear undo/redo history for generation results."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Generic, List, Optional, TypeVar

from modules.assets.image_asset import ImageAsset

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class GenerationDocument:
    """Versioned snapshot of the editing state.

    ``custom_edit`` and ``background_edit`` hold instructions that have not been
    applied yet; a successful generation clears both.
    """

    generated_preview: Optional[str] = None
    custom_edit: str = ""
    background_edit: str = ""
    base_image: Optional[ImageAsset] = None

    def __post_init__(self) -> None:
        if self.generated_preview is None:
            return
        if self.base_image is None:
            raise ValueError("A generated preview requires a base image for the next generation.")
        if self.generated_preview != self.base_image.preview_url:
            raise ValueError("The generated preview and the base image must be the same image.")

    @classmethod
    def from_result(cls, image: ImageAsset) -> "GenerationDocument":
        """Document produced by a successful generation: preview and base move together."""
        return cls(generated_preview=image.preview_url, base_image=image)

    def with_result(self, image: ImageAsset) -> "GenerationDocument":
        """Same as :meth:`from_result` but keeps the pending edit text."""
        return replace(self, generated_preview=image.preview_url, base_image=image)

    @property
    def has_result(self) -> bool:
        return self.generated_preview is not None


class HistoryStore(Generic[T]):
    """Snapshot list plus a cursor; pushing after an undo discards the redo branch."""

    def __init__(self, seed: T) -> None:
        self._entries: List[T] = [seed]
        self._cursor = 0
        self._epoch = 0

    def push(self, value: T) -> None:
        """Append a snapshot after the cursor, dropping anything that was redoable."""
        del self._entries[self._cursor + 1 :]
        self._entries.append(value)
        self._cursor = len(self._entries) - 1

    def reset(self, seed: T) -> None:
        """Start a fresh single-entry history that cannot be undone past."""
        self._entries = [seed]
        self._cursor = 0
        self._epoch += 1

    def undo(self) -> bool:
        if self._cursor == 0:
            return False
        self._cursor -= 1
        return True

    def redo(self) -> bool:
        if self._cursor >= len(self._entries) - 1:
            return False
        self._cursor += 1
        return True

    def current(self) -> T:
        return self._entries[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    @property
    def epoch(self) -> int:
        """Incremented on every reset; lets async callers detect a discontinuity."""
        return self._epoch

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._entries)

    def snapshots(self) -> List[T]:
        """Return a copy of every stored snapshot, oldest first."""
        return list(self._entries)
