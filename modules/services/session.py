"""Top-level try-on session: selection state, history and UI flags."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from modules.assets.image_asset import ImageAsset
from modules.prompts.options import BackgroundOption, FitOption, PoseOption, SelectionState
from modules.services.error_classifier import GenerationError, RequestRejected
from modules.services.history_service import GenerationDocument, HistoryStore
from modules.services.orchestrator import (
    GenerationOrchestrator,
    ProgressSink,
    RemoteClient,
    has_pending_work,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_GARMENTS = 4


class TryOnSession:
    """Owns everything one user edits.

    Selection edits never touch history on their own; callers that need the
    generation state invalidated (e.g. after adding garments) call
    :meth:`reset_generation_state` explicitly.
    """

    def __init__(
        self,
        client: RemoteClient,
        max_garments: int = DEFAULT_MAX_GARMENTS,
        timeout: Optional[float] = None,
    ) -> None:
        self.selection = SelectionState()
        self.history: HistoryStore[GenerationDocument] = HistoryStore(GenerationDocument())
        self.orchestrator = GenerationOrchestrator(client, self.history, timeout=timeout)
        self.max_garments = max_garments
        self.error: Optional[str] = None
        self.welcome_seen = False

    # Read-only views ----------------------------------------------------------
    @property
    def document(self) -> GenerationDocument:
        return self.history.current()

    @property
    def is_refinement(self) -> bool:
        return self.document.has_result

    @property
    def has_garments(self) -> bool:
        return self.selection.has_garments

    @property
    def busy(self) -> bool:
        return self.orchestrator.busy

    @property
    def suggestions(self) -> List[str]:
        return list(self.orchestrator.suggestions)

    @property
    def can_generate(self) -> bool:
        if self.document.base_image is None or self.busy:
            return False
        return self.is_refinement or has_pending_work(self.selection, self.document)

    def disabled_reason(self) -> Optional[str]:
        """Why the generate action is unavailable, or ``None`` when it is not."""
        if self.busy or self.can_generate:
            return None
        if self.document.base_image is None:
            return "Upload your photo to get started."
        return "Add an outfit or describe a change to make."

    def action_label(self) -> str:
        if self.busy:
            return "Generating..."
        if self.selection.person_image is None:
            return "Upload Your Photo to Start"
        if self.is_refinement:
            return "Generate Again"
        if not has_pending_work(self.selection, self.document):
            return "Add Clothing or Custom Changes"
        return "Try It On!"

    # Selection edits ----------------------------------------------------------
    def set_person_image(self, image: Optional[ImageAsset]) -> None:
        """Replace the subject photo; every option returns to its default."""
        self.selection = SelectionState(person_image=image)
        self.error = None
        self.orchestrator.clear_suggestions()
        self.history.reset(GenerationDocument(base_image=image))

    def add_garments(self, images: Sequence[ImageAsset]) -> int:
        """Append garment images up to the limit; returns how many were kept."""
        room = self.max_garments - len(self.selection.garment_images)
        accepted = tuple(images)[: max(room, 0)]
        if len(accepted) < len(images):
            logger.info("Ignoring %d garment image(s) over the limit of %d", len(images) - len(accepted), self.max_garments)
        if accepted:
            self.selection = replace(
                self.selection, garment_images=self.selection.garment_images + accepted
            )
        return len(accepted)

    def remove_garment(self, index: int) -> None:
        garments = list(self.selection.garment_images)
        if not 0 <= index < len(garments):
            raise IndexError(f"No garment image at position {index}")
        del garments[index]
        self.selection = replace(self.selection, garment_images=tuple(garments))
        if not garments:
            # pose keeps its value even if it was "replicate"
            self.selection = self.selection.with_background(BackgroundOption.CUSTOM)

    def set_pose(self, pose: PoseOption | str) -> None:
        self.selection = self.selection.with_pose(pose)

    def set_custom_pose_text(self, text: str) -> None:
        self.selection = replace(self.selection, custom_pose=text or "")

    def set_fit(self, fit: FitOption | str) -> None:
        self.selection = self.selection.with_fit(fit)

    def set_background(self, background: BackgroundOption | str) -> None:
        self.selection = self.selection.with_background(background)

    # Versioned edits ----------------------------------------------------------
    def set_custom_edit(self, text: str) -> None:
        if text == self.document.custom_edit:
            return
        self.history.push(replace(self.document, custom_edit=text))

    def set_background_edit(self, text: str) -> None:
        if text == self.document.background_edit:
            return
        self.history.push(replace(self.document, background_edit=text))

    def apply_suggestion(self, suggestion: str) -> None:
        if self.is_refinement:
            self.set_custom_edit(suggestion)
        else:
            self.set_custom_edit(f"{self.document.custom_edit} {suggestion}".strip())

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    # Resets -------------------------------------------------------------------
    def reset_generation_state(self) -> None:
        """Forget generated results and pending text, keeping the chosen inputs."""
        self.history.reset(GenerationDocument(base_image=self.selection.person_image))
        self.error = None
        self.orchestrator.clear_suggestions()
        self.selection = self.selection.with_background(BackgroundOption.CUSTOM)

    def start_over(self) -> None:
        self.selection = SelectionState()
        self.history.reset(GenerationDocument())
        self.error = None
        self.orchestrator.clear_suggestions()

    def dismiss_welcome(self) -> None:
        self.welcome_seen = True

    # Remote operations --------------------------------------------------------
    async def generate(self, progress: Optional[ProgressSink] = None) -> Optional[GenerationDocument]:
        self.error = None
        try:
            return await self.orchestrator.build_and_generate(
                self.selection,
                self.document.base_image,
                is_refinement=self.is_refinement,
                progress=progress,
            )
        except (GenerationError, RequestRejected) as exc:
            self.error = str(exc)
            raise

    async def enhance(self, progress: Optional[ProgressSink] = None) -> Optional[GenerationDocument]:
        self.error = None
        try:
            return await self.orchestrator.build_and_enhance(progress=progress)
        except (GenerationError, RequestRejected) as exc:
            self.error = str(exc)
            raise
