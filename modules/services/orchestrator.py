"""Drive generate / enhance / suggest calls and apply their outcome to history."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable, List, Optional, Protocol, Sequence

from modules.assets.image_asset import ImageAsset
from modules.prompts.options import SelectionState
from modules.prompts.request_builder import (
    GenerationRequest,
    build_enhancement_request,
    build_suggestion_request,
    build_tryon_request,
)
from modules.services.error_classifier import RequestRejected, classify_failure
from modules.services.history_service import GenerationDocument, HistoryStore

logger = logging.getLogger(__name__)

ProgressSink = Callable[[str], None]

GENERATE_CONTEXT = "virtual try-on generation"
ENHANCE_CONTEXT = "image enhancement"


class RemoteClient(Protocol):
    """Anything that can execute built requests remotely."""

    async def generate(self, request: GenerationRequest) -> Any: ...

    async def suggest(self, request: GenerationRequest) -> Iterable[str]: ...


def has_pending_work(selection: SelectionState, document: GenerationDocument) -> bool:
    """True when a first generation would change something."""
    return (
        selection.has_garments
        or bool(document.custom_edit.strip())
        or bool(document.background_edit.strip())
        or selection.wants_custom_pose
    )


class GenerationOrchestrator:
    """Runs at most one generate/enhance call at a time against ``client``.

    Successful results are pushed into ``history``; failures leave it untouched
    and surface as :class:`~modules.services.error_classifier.GenerationError`.
    Style suggestions are ephemeral and live in :attr:`suggestions`.
    """

    def __init__(
        self,
        client: RemoteClient,
        history: Optional[HistoryStore[GenerationDocument]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.client = client
        self.history: HistoryStore[GenerationDocument] = history or HistoryStore(GenerationDocument())
        self.timeout = timeout
        self.busy = False
        self.suggestions: List[str] = []
        self.suggestions_loading = False
        self._operation_id = 0
        self._suggestion_task: Optional[asyncio.Task] = None

    # Public API ---------------------------------------------------------------
    async def build_and_generate(
        self,
        selection: SelectionState,
        base_image: Optional[ImageAsset],
        is_refinement: bool,
        progress: Optional[ProgressSink] = None,
    ) -> Optional[GenerationDocument]:
        """Generate a new image and push it into history.

        Returns the pushed document, or ``None`` if the history was reset while
        the call was in flight (the late result is dropped).
        """
        self._ensure_idle()
        if base_image is None:
            raise RequestRejected("Upload your photo to get started.")

        document = self.history.current()
        if not is_refinement and not has_pending_work(selection, document):
            raise RequestRejected("Add an outfit or describe a change to make.")
        if is_refinement:
            # garments are already on the previous result
            selection = selection.without_garments()

        request = build_tryon_request(
            selection,
            base_image,
            custom_edit=document.custom_edit,
            background_edit=document.background_edit,
        )
        image = await self._run_image_call(request, GENERATE_CONTEXT, progress)
        if image is None:
            return None

        result = GenerationDocument.from_result(image)
        self.history.push(result)
        logger.info("Try-on result pushed (history length %d)", len(self.history))

        if not is_refinement and selection.has_garments:
            self._start_suggestions(base_image, selection.garment_images)
        return result

    async def build_and_enhance(
        self,
        image: Optional[ImageAsset] = None,
        progress: Optional[ProgressSink] = None,
    ) -> Optional[GenerationDocument]:
        """Enhance the current result; pending edit text is carried over."""
        self._ensure_idle()
        document = self.history.current()
        if not document.has_result:
            raise RequestRejected("Generate an image before enhancing it.")

        source = image or document.base_image
        enhanced = await self._run_image_call(build_enhancement_request(source), ENHANCE_CONTEXT, progress)
        if enhanced is None:
            return None

        result = self.history.current().with_result(enhanced)
        self.history.push(result)
        logger.info("Enhanced result pushed (history length %d)", len(self.history))
        return result

    async def request_suggestions(
        self, base_image: ImageAsset, garment_images: Sequence[ImageAsset]
    ) -> List[str]:
        """Fetch accessory suggestions; any failure yields an empty list."""
        request = build_suggestion_request(base_image, garment_images)
        try:
            suggestions = await self.client.suggest(request)
            return [str(item) for item in suggestions if str(item).strip()]
        except Exception as exc:  # noqa: BLE001
            logger.warning("Style suggestions unavailable: %s", exc)
            return []

    async def wait_for_suggestions(self) -> List[str]:
        """Await the side-call started by the last first-time generation, if any."""
        task = self._suggestion_task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        return list(self.suggestions)

    def clear_suggestions(self) -> None:
        """Drop current suggestions and invalidate any in-flight side-call."""
        self._operation_id += 1
        self._cancel_suggestions()
        self.suggestions = []

    # Internal helpers ---------------------------------------------------------
    def _ensure_idle(self) -> None:
        if self.busy:
            raise RequestRejected("A generation is already in progress. Please wait for it to finish.")

    async def _run_image_call(
        self,
        request: GenerationRequest,
        context: str,
        progress: Optional[ProgressSink],
    ) -> Optional[ImageAsset]:
        self.busy = True
        self.clear_suggestions()
        epoch = self.history.epoch
        try:
            if progress is not None and request.progress_label:
                progress(request.progress_label)
            logger.info("Starting %s with %d attachment(s)", context, len(request.attachments))
            try:
                payload = await asyncio.wait_for(self.client.generate(request), timeout=self.timeout)
                image = ImageAsset.from_bytes(payload.data, payload.mime_type, name="generated-image")
            except Exception as exc:
                error = classify_failure(exc, context)
                logger.warning("%s failed (%s): %s", context, error.kind.value, exc)
                raise error from exc
        finally:
            self.busy = False

        if self.history.epoch != epoch:
            logger.info("Discarding %s result: history was reset while it was running", context)
            return None
        return image

    def _start_suggestions(self, base_image: ImageAsset, garments: Sequence[ImageAsset]) -> None:
        operation_id = self._operation_id
        self.suggestions_loading = True
        self._suggestion_task = asyncio.create_task(
            self._collect_suggestions(operation_id, base_image, tuple(garments))
        )

    async def _collect_suggestions(
        self, operation_id: int, base_image: ImageAsset, garments: Sequence[ImageAsset]
    ) -> None:
        try:
            suggestions = await self.request_suggestions(base_image, garments)
        finally:
            if operation_id == self._operation_id:
                self.suggestions_loading = False
        if operation_id != self._operation_id:
            logger.debug("Dropping superseded style suggestions")
            return
        self.suggestions = suggestions

    def _cancel_suggestions(self) -> None:
        task = self._suggestion_task
        self._suggestion_task = None
        self.suggestions_loading = False
        if task is not None and not task.done():
            task.cancel()
