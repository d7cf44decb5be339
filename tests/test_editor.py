"""
Tests de la session d'édition : sélection, flux de suppression, réglages, upload d'image.
"""

import pytest
from unittest.mock import MagicMock
from app.core.errors import CollaboratorError, UploadRejected, ValidationFailed
from app.schemas.block import ParagraphBlock
from app.services.blob_store import BlobStore
from app.services.editor import UPLOAD_FAILED_MESSAGE, EditorSession

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 64

# ========== TEST SELECTION ==========

def test_add_selects_and_bumps_scroll_trigger():
    session = EditorSession()
    block = session.add_block("paragraph")

    assert session.selected_block_id == block.id
    assert session.active_block_id == block.id
    assert session.scroll_trigger == 1

def test_editing_same_block_twice_bumps_trigger_each_time():
    session = EditorSession()
    block = session.add_block("paragraph")

    session.update_block(block.id, {"content": "a"})
    session.update_block(block.id, {"content": "ab"})
    session.update_styles(block.id, {"size": "large"})

    assert session.scroll_trigger == 4
    assert session.active_block_id == block.id

def test_select_unknown_block_is_noop():
    session = EditorSession()
    assert session.select("block_missing") is False
    assert session.selected_block_id is None
    assert session.scroll_trigger == 0

def test_update_unknown_id_still_selects():
    session = EditorSession()
    session.update_block("block_missing", {"content": "x"})
    assert session.selected_block_id == "block_missing"
    assert session.blocks == []

# ========== TEST SUPPRESSION ==========

def test_remove_content_less_block_immediately():
    session = EditorSession()
    divider = session.add_block("divider")

    assert session.request_remove(divider.id) == "removed"
    assert session.blocks == []
    assert session.pending_delete_id is None

def test_remove_with_content_needs_confirmation():
    """Paragraphe "Hello" : confirmation puis séquence vide, le retrait est annulable"""
    session = EditorSession()
    block = session.add_block("paragraph")
    session.update_block(block.id, {"content": "Hello"})

    assert session.request_remove(block.id) == "pending_confirmation"
    assert session.pending_delete_id == block.id
    assert len(session.blocks) == 1

    assert session.confirm_remove() is True
    assert session.blocks == []
    assert session.can_undo

    session.undo()
    assert session.blocks[0].content == "Hello"

def test_cancel_remove_returns_to_idle():
    session = EditorSession()
    block = session.add_block("paragraph")
    session.update_block(block.id, {"content": "Keep me"})

    session.request_remove(block.id)
    session.cancel_remove()

    assert session.pending_delete_id is None
    assert session.confirm_remove() is False
    assert len(session.blocks) == 1

def test_removing_selected_block_clears_selection():
    session = EditorSession()
    block = session.add_block("divider")
    assert session.selected_block_id == block.id

    session.request_remove(block.id)

    assert session.selected_block_id is None
    assert session.active_block_id is None

def test_remove_unknown_block():
    assert EditorSession().request_remove("nope") == "noop"

# ========== TEST REGLAGES ==========

def test_update_settings_merges_title_styles():
    session = EditorSession()
    session.update_settings(title_styles={"size": "large"})
    session.update_settings(title_styles={"color": "#FF0000"})

    assert session.settings.title_styles.size == "large"
    assert session.settings.title_styles.color == "#FF0000"

def test_update_settings_unknown_field_rejected():
    session = EditorSession()
    with pytest.raises(ValidationFailed):
        session.update_settings(font="Comic Sans")

def test_theme_changes_palette():
    session = EditorSession()
    light = session.palette()
    session.update_settings(theme="dark")
    assert session.palette() != light

# ========== TEST UNSAVED CHANGES ==========

def test_unsaved_changes_by_value():
    session = EditorSession([ParagraphBlock(id="p", content="Hi")])
    assert session.has_unsaved_changes is False

    session.update_block("p", {"content": "Hello"})
    assert session.has_unsaved_changes is True

    session.update_block("p", {"content": "Hi"})
    assert session.has_unsaved_changes is False

def test_mark_saved_resets_baseline():
    session = EditorSession()
    session.add_block("divider")
    session.update_settings(title="Welcome")
    assert session.has_unsaved_changes

    session.mark_saved()
    assert not session.has_unsaved_changes

# ========== TEST OBSERVATEURS ==========

def test_observer_events():
    session = EditorSession()
    events = []
    session.subscribe(lambda event, s: events.append(event))

    block = session.add_block("paragraph")
    session.select(block.id)
    session.update_settings(theme="dark")

    assert events == ["sequence_changed", "selection_changed", "selection_changed", "settings_changed"]

# ========== TEST UPLOAD ==========

def test_upload_image_writes_url(tmp_path):
    session = EditorSession()
    block = session.add_block("image")
    store = BlobStore(root=str(tmp_path), base_url="http://cdn.test")
    progress = []

    url = session.upload_image(block.id, "cover.png", "image/png", PNG, store, owner_id=7,
                               on_progress=lambda done, total: progress.append((done, total)))

    assert url.startswith("http://cdn.test/uploads/users/7/content-images/")
    assert url.endswith("_cover.png")
    assert session.blocks[0].url == url
    assert progress[-1] == (len(PNG), len(PNG))
    assert session.last_error is None

def test_upload_rejects_non_image_before_upload():
    session = EditorSession()
    block = session.add_block("image")
    store = MagicMock()

    with pytest.raises(UploadRejected):
        session.upload_image(block.id, "doc.pdf", "application/pdf", b"%PDF", store, owner_id=1)

    store.upload.assert_not_called()
    assert session.last_error == "Please select an image file"

def test_upload_rejects_oversized_image():
    session = EditorSession()
    block = session.add_block("image")
    store = MagicMock()

    with pytest.raises(UploadRejected):
        session.upload_image(block.id, "big.png", "image/png", b"0" * (5 * 1024 * 1024 + 1), store, owner_id=1)
    store.upload.assert_not_called()

def test_upload_failure_leaves_url_empty():
    session = EditorSession()
    block = session.add_block("image")
    store = MagicMock()
    store.upload.side_effect = CollaboratorError("disk full")

    with pytest.raises(CollaboratorError):
        session.upload_image(block.id, "cover.png", "image/png", PNG, store, owner_id=1)

    assert session.blocks[0].url == ""
    assert session.last_error == UPLOAD_FAILED_MESSAGE

def test_upload_block_removed_during_upload():
    session = EditorSession()
    block = session.add_block("image")
    store = MagicMock()

    def upload(path, data, on_progress=None):
        session.request_remove(block.id)
        return "http://cdn/x.png"

    store.upload.side_effect = upload

    assert session.upload_image(block.id, "x.png", "image/png", PNG, store, owner_id=1) == "http://cdn/x.png"
    assert session.blocks == []

def test_upload_on_non_image_block():
    session = EditorSession()
    block = session.add_block("paragraph")
    with pytest.raises(ValidationFailed):
        session.upload_image(block.id, "x.png", "image/png", PNG, MagicMock(), owner_id=1)

# ========== TEST STATE ==========

def test_state_snapshot():
    session = EditorSession()
    block = session.add_block("heading1")
    state = session.state("prod1")

    assert state.product_id == "prod1"
    assert state.blocks[0].id == block.id
    assert state.selected_block_id == block.id
    assert state.can_undo is True
    assert state.has_unsaved_changes is True
