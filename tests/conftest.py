"""Shared fixtures: tiny real images and a scriptable remote client."""

from __future__ import annotations

import io
from types import SimpleNamespace
from typing import Callable, List, Optional

import pytest
from PIL import Image

from modules.assets.image_asset import ImageAsset


def encode_image(color: str = "red", fmt: str = "PNG", size: tuple[int, int] = (8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    return encode_image


@pytest.fixture
def make_asset() -> Callable[..., ImageAsset]:
    def _make(color: str = "red", fmt: str = "PNG") -> ImageAsset:
        return ImageAsset.from_bytes(encode_image(color, fmt), name=f"{color}.{fmt.lower()}")

    return _make


class DummyRemoteClient:
    """Records requests; returns queued results or raises queued failures."""

    def __init__(self) -> None:
        self.generate_calls: list = []
        self.suggest_calls: list = []
        self.generate_results: List[object] = []
        self.suggest_results: List[object] = []
        self.generate_gate = None
        self.suggest_gate = None

    def queue_image(self, color: str = "blue", fmt: str = "PNG") -> None:
        mime = "image/png" if fmt == "PNG" else f"image/{fmt.lower()}"
        self.generate_results.append(SimpleNamespace(data=encode_image(color, fmt), mime_type=mime))

    def queue_failure(self, failure: BaseException) -> None:
        self.generate_results.append(failure)

    async def generate(self, request):
        self.generate_calls.append(request)
        if self.generate_gate is not None:
            await self.generate_gate.wait()
        result = self.generate_results.pop(0) if self.generate_results else None
        if result is None:
            self.queue_image()
            result = self.generate_results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    async def suggest(self, request):
        self.suggest_calls.append(request)
        if self.suggest_gate is not None:
            await self.suggest_gate.wait()
        result: Optional[object] = self.suggest_results.pop(0) if self.suggest_results else ["a silver chain"]
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def remote_client() -> DummyRemoteClient:
    return DummyRemoteClient()
