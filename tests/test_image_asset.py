"""ImageAsset 与图像工具单元测试。"""

from __future__ import annotations

import base64
import dataclasses
import io

import pytest
from PIL import Image

from modules.assets.image_asset import ImageAsset
from modules.utils import image_utils


def test_from_bytes_sniffs_format_and_derives_encodings(image_bytes):
    data = image_bytes("red", "JPEG")

    asset = ImageAsset.from_bytes(data, mime_type="image/png")

    assert asset.mime_type == "image/jpeg"
    assert asset.raw_base64 == base64.b64encode(data).decode("ascii")
    assert asset.preview_url == f"data:image/jpeg;base64,{asset.raw_base64}"
    assert asset.extension == "jpeg"


def test_asset_is_immutable(make_asset):
    asset = make_asset()

    with pytest.raises(dataclasses.FrozenInstanceError):
        asset.mime_type = "image/webp"  # type: ignore[misc]


def test_data_url_round_trip_preserves_image(make_asset):
    original = make_asset("blue", "WEBP")

    restored = ImageAsset.from_data_url(original.preview_url)

    assert restored == original
    assert restored.mime_type == "image/webp"


def test_from_path_reads_file(tmp_path, image_bytes):
    path = tmp_path / "person.png"
    path.write_bytes(image_bytes("white"))

    asset = ImageAsset.from_path(path)

    assert asset.name == "person.png"
    assert asset.mime_type == "image/png"


@pytest.mark.parametrize("payload", [b"", b"definitely not an image"])
def test_from_bytes_rejects_invalid_payload(payload):
    with pytest.raises(ValueError):
        ImageAsset.from_bytes(payload)


def test_phone_camera_mpo_is_treated_as_jpeg():
    buffer = io.BytesIO()
    first = Image.new("RGB", (8, 8), "white")
    first.save(buffer, format="MPO", save_all=True, append_images=[Image.new("RGB", (8, 8), "black")])
    data = buffer.getvalue()

    asset = ImageAsset.from_bytes(data, name="phone.jpg")

    assert data[:2] == b"\xff\xd8"
    assert asset.mime_type == "image/jpeg"
    assert asset.extension == "jpeg"
    assert image_utils.to_pil(asset.data).size == (8, 8)


def test_unsupported_format_is_rejected(image_bytes):
    with pytest.raises(ValueError):
        ImageAsset.from_bytes(image_bytes("red", "GIF"))


def test_parse_data_url_requires_base64():
    with pytest.raises(ValueError):
        image_utils.parse_data_url("data:image/png,plain-text")
    with pytest.raises(ValueError):
        image_utils.parse_data_url("https://example.com/image.png")


def test_to_pil_decodes_for_display(make_asset):
    image = image_utils.to_pil(make_asset().data)

    assert image.size == (8, 8)
