"""HistoryStore 与 GenerationDocument 单元测试。"""

from __future__ import annotations

import random
from dataclasses import replace

import pytest

from modules.services.history_service import GenerationDocument, HistoryStore


def test_seeded_history_has_single_current_entry():
    history = HistoryStore("seed")

    assert history.current() == "seed"
    assert len(history) == 1
    assert not history.can_undo
    assert not history.can_redo


def test_undo_redo_walk_pushed_entries():
    history = HistoryStore("A")
    history.push("B")
    history.push("C")

    assert history.undo() is True
    assert history.current() == "B"
    assert history.undo() is True
    assert history.current() == "A"
    assert history.undo() is False
    assert history.current() == "A"

    assert history.redo() is True
    assert history.redo() is True
    assert history.current() == "C"
    assert history.redo() is False


def test_push_after_undo_discards_redo_branch():
    history = HistoryStore("A")
    history.push("B")
    history.push("C")

    history.undo()
    assert history.current() == "B"
    history.push("D")

    assert history.snapshots() == ["A", "B", "D"]
    assert history.current() == "D"
    assert history.redo() is False
    assert not history.can_redo


def test_reset_yields_single_entry_and_bumps_epoch():
    history = HistoryStore("A")
    history.push("B")
    history.undo()
    epoch = history.epoch

    history.reset("Z")

    assert history.snapshots() == ["Z"]
    assert not history.can_undo
    assert not history.can_redo
    assert history.epoch == epoch + 1


def test_random_operations_follow_reference_model():
    rng = random.Random(7)
    history = HistoryStore(0)
    model, cursor = [0], 0

    for step in range(1, 400):
        action = rng.choice(["push", "undo", "redo"])
        if action == "push":
            history.push(step)
            model = model[: cursor + 1] + [step]
            cursor = len(model) - 1
        elif action == "undo":
            moved = history.undo()
            assert moved == (cursor > 0)
            cursor = max(cursor - 1, 0)
        else:
            moved = history.redo()
            assert moved == (cursor < len(model) - 1)
            cursor = min(cursor + 1, len(model) - 1)

        assert history.current() == model[cursor]
        assert 0 <= history.cursor < len(history)


def test_document_result_moves_preview_and_base_together(make_asset):
    image = make_asset("green")
    document = GenerationDocument(custom_edit="red scarf", background_edit="beach").with_result(image)

    assert document.generated_preview == image.preview_url
    assert document.base_image == image
    assert document.custom_edit == "red scarf"

    fresh = GenerationDocument.from_result(image)
    assert fresh.custom_edit == ""
    assert fresh.background_edit == ""
    assert fresh.has_result


def test_document_rejects_preview_without_base():
    with pytest.raises(ValueError):
        GenerationDocument(generated_preview="data:image/png;base64,AAAA")


def test_document_rejects_preview_of_another_image(make_asset):
    shown, base = make_asset("green"), make_asset("purple")

    with pytest.raises(ValueError):
        GenerationDocument(generated_preview=shown.preview_url, base_image=base)
    with pytest.raises(ValueError):
        replace(GenerationDocument.from_result(shown), base_image=base)
