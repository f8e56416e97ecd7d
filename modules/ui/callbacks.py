"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from config.settings import AppConfig
from modules.assets.image_asset import ImageAsset
from modules.pipelines.gemini_client import GeminiTryOnClient
from modules.services.error_classifier import GenerationError, RequestRejected
from modules.services.session import TryOnSession
from modules.utils.image_utils import to_pil

logger = logging.getLogger(__name__)


def build_session(config: AppConfig, client: Optional[Any] = None) -> TryOnSession:
    """Create a session wired to the configured Gemini client."""
    return TryOnSession(
        client or GeminiTryOnClient(config),
        max_garments=config.max_garments,
        timeout=config.request_timeout,
    )


def build_callbacks(
    config: AppConfig,
    session: Optional[TryOnSession] = None,
    client: Optional[Any] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions bound to one session."""

    state = session or build_session(config, client)

    def _display(asset: Optional[ImageAsset]) -> Optional[Any]:
        if asset is None:
            return None
        return to_pil(asset.data)

    def _result_image() -> Optional[Any]:
        document = state.document
        return _display(document.base_image) if document.has_result else None

    def _gallery() -> List[Any]:
        return [_display(image) for image in state.selection.garment_images]

    def _status(prefix: str = "") -> str:
        parts = [prefix] if prefix else []
        reason = state.disabled_reason()
        if reason:
            parts.append(reason)
        parts.append(f"Next: {state.action_label()}")
        history = []
        if state.history.can_undo:
            history.append("undo")
        if state.history.can_redo:
            history.append("redo")
        if history:
            parts.append(f"History: {' / '.join(history)} available")
        return " · ".join(parts)

    def _suggestion_text() -> str:
        suggestions = state.suggestions
        if not suggestions:
            return ""
        return "\n".join(f"- {item}" for item in suggestions)

    def _load(path: Any) -> ImageAsset:
        if isinstance(path, ImageAsset):
            return path
        return ImageAsset.from_path(str(path))

    def _selection_view() -> tuple[List[Any], str, str, str, str]:
        selection = state.selection
        return (
            _gallery(),
            selection.pose.value,
            selection.custom_pose,
            selection.fit.value,
            selection.background.value,
        )

    def _document_view() -> tuple[str, str, str]:
        document = state.document
        return _suggestion_text(), document.custom_edit, document.background_edit

    def _reset_view(person: Optional[Any], message: str) -> tuple[Any, ...]:
        # person, garment files, gallery, pose, custom pose, fit, background,
        # result, suggestions, custom edit, background edit, status
        return (person, None, *_selection_view(), _result_image(), *_document_view(), _status(message))

    def _garment_view(message: str = "") -> tuple[Any, ...]:
        # garment files, gallery, background, result, suggestions, custom edit, background edit, status
        return (
            None,
            _gallery(),
            state.selection.background.value,
            _result_image(),
            *_document_view(),
            _status(message),
        )

    def on_upload_person(path: Any) -> tuple[Any, ...]:
        if not path:
            state.set_person_image(None)
            return _reset_view(None, "Photo removed.")
        try:
            image = _load(path)
        except (OSError, ValueError) as exc:
            return _reset_view(_display(state.selection.person_image), f"Could not read photo: {exc}")
        state.set_person_image(image)
        return _reset_view(_display(image), "Photo loaded.")

    def on_add_garments(paths: Optional[Sequence[Any]]) -> tuple[Any, ...]:
        if not paths:
            return _garment_view()
        try:
            images = [_load(path) for path in paths]
        except (OSError, ValueError) as exc:
            return _garment_view(f"Could not read outfit image: {exc}")
        kept = state.add_garments(images)
        state.reset_generation_state()
        message = f"Added {kept} outfit image(s)."
        if kept < len(images):
            message += f" Up to {state.max_garments} images are supported."
        return _garment_view(message)

    def on_remove_garment(number: Any) -> tuple[Any, ...]:
        """Remove the garment at 1-based position ``number``."""
        try:
            state.remove_garment(int(number) - 1)
        except (TypeError, ValueError, IndexError) as exc:
            return _garment_view(f"Could not remove item: {exc}")
        state.reset_generation_state()
        return _garment_view("Outfit image removed.")

    def on_change_options(pose: str, custom_pose: str, fit: str, background: str) -> str:
        state.set_pose(pose)
        state.set_custom_pose_text(custom_pose or "")
        state.set_fit(fit)
        state.set_background(background)
        return _status()

    async def on_generate(custom_edit: str, background_edit: str) -> tuple[Optional[Any], str, str, str, str]:
        state.set_custom_edit(custom_edit or "")
        state.set_background_edit(background_edit or "")
        progress_messages: list[str] = []
        try:
            await state.generate(progress=progress_messages.append)
        except (GenerationError, RequestRejected) as exc:
            return (_result_image(), _status(str(exc)), *_document_view())

        suggestions = await state.orchestrator.wait_for_suggestions()
        done = progress_messages[-1] if progress_messages else "Generation"
        message = f"{done.rstrip('.')} done."
        logger.info("Generation finished with %d suggestion(s)", len(suggestions))
        return (_result_image(), _status(message), *_document_view())

    async def on_enhance() -> tuple[Optional[Any], str, str]:
        try:
            await state.enhance()
        except (GenerationError, RequestRejected) as exc:
            return _result_image(), _status(str(exc)), _suggestion_text()
        return _result_image(), _status("Enhancement applied."), _suggestion_text()

    def _history_view(message: str) -> tuple[Optional[Any], str, str, str]:
        document = state.document
        return _result_image(), document.custom_edit, document.background_edit, _status(message)

    def on_undo() -> tuple[Optional[Any], str, str, str]:
        moved = state.undo()
        return _history_view("Undone." if moved else "Nothing to undo.")

    def on_redo() -> tuple[Optional[Any], str, str, str]:
        moved = state.redo()
        return _history_view("Redone." if moved else "Nothing to redo.")

    def on_start_over() -> tuple[Any, ...]:
        state.start_over()
        return _reset_view(None, "Started over.")

    def on_apply_suggestion(suggestion: str) -> str:
        if suggestion and suggestion.strip():
            state.apply_suggestion(suggestion.strip().lstrip("- ").strip())
        return state.document.custom_edit

    def on_dismiss_welcome() -> bool:
        state.dismiss_welcome()
        return False

    return {
        "on_upload_person": on_upload_person,
        "on_add_garments": on_add_garments,
        "on_remove_garment": on_remove_garment,
        "on_change_options": on_change_options,
        "on_generate": on_generate,
        "on_enhance": on_enhance,
        "on_undo": on_undo,
        "on_redo": on_redo,
        "on_start_over": on_start_over,
        "on_apply_suggestion": on_apply_suggestion,
        "on_dismiss_welcome": on_dismiss_welcome,
        "session": state,
    }
