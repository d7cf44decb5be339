"""
Session d'édition du contenu d'un produit.

Possède le block store, les réglages de page, la sélection et le flux de suppression :
    idle -> pending_confirmation (bloc avec contenu) -> confirmé : supprimé / annulé : idle
Les blocs sans contenu sont supprimés directement.
"""

import logging
from typing import Callable, Dict, List, Optional
from pydantic import ValidationError
from app.core.errors import CollaboratorError, ValidationFailed
from app.schemas.content import EditorState
from app.schemas.page import PageSettings, PageSettingsUpdate
from app.services.blob_store import BlobStore, ProgressCallback, content_image_path, validate_image
from app.services.block_store import BlockStore, dumps_blocks, has_content
from app.services.history import DEFAULT_LIMIT
from app.services.style_resolver import background_palette

logger = logging.getLogger(__name__)

SEQUENCE_CHANGED = "sequence_changed"
SELECTION_CHANGED = "selection_changed"
SETTINGS_CHANGED = "settings_changed"

UPLOAD_FAILED_MESSAGE = "Failed to upload image. Please try again."

Observer = Callable[[str, "EditorSession"], None]


class EditorSession:
    def __init__(self, blocks: Optional[List] = None, settings: Optional[PageSettings] = None,
                 history_limit: int = DEFAULT_LIMIT):
        self.store = BlockStore(blocks, history_limit)
        self.settings = settings or PageSettings()

        self.selected_block_id: Optional[str] = None
        self.active_block_id: Optional[str] = None
        self.scroll_trigger = 0
        self.pending_delete_id: Optional[str] = None
        self.last_error: Optional[str] = None

        self._observers: List[Observer] = []
        self._baseline = self._fingerprint()
        self.store.subscribe(self._on_sequence_changed)

    # ---------- observateurs ----------

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        self._observers.append(callback)
        return lambda: self._observers.remove(callback)

    def _emit(self, event: str) -> None:
        for callback in list(self._observers):
            callback(event, self)

    def _on_sequence_changed(self, blocks: List) -> None:
        ids = {b.id for b in blocks}
        cleared = False
        # un bloc disparu (suppression, undo) ne peut pas rester sélectionné
        if self.selected_block_id and self.selected_block_id not in ids:
            self.selected_block_id = None
            cleared = True
        if self.active_block_id and self.active_block_id not in ids:
            self.active_block_id = None
            cleared = True
        if self.pending_delete_id and self.pending_delete_id not in ids:
            self.pending_delete_id = None
        self._emit(SEQUENCE_CHANGED)
        if cleared:
            self._emit(SELECTION_CHANGED)

    # ---------- lecture ----------

    @property
    def blocks(self) -> List:
        return self.store.blocks

    @property
    def can_undo(self) -> bool:
        return self.store.history.can_undo

    def _fingerprint(self):
        return dumps_blocks(self.store.blocks), self.settings.model_dump_json()

    @property
    def has_unsaved_changes(self) -> bool:
        return self._fingerprint() != self._baseline

    def mark_saved(self) -> None:
        self._baseline = self._fingerprint()

    def palette(self) -> List[str]:
        return background_palette(self.settings.theme)

    # ---------- sélection ----------

    def _activate(self, block_id: str) -> None:
        self.selected_block_id = block_id
        self.active_block_id = block_id
        self.scroll_trigger += 1  # re-scroll même si c'est le même bloc
        self._emit(SELECTION_CHANGED)

    def select(self, block_id: str) -> bool:
        if self.store.get(block_id) is None:
            return False
        self._activate(block_id)
        return True

    # ---------- blocs ----------

    def add_block(self, kind: str):
        block = self.store.add(kind)
        self._activate(block.id)
        return block

    def update_block(self, block_id: str, partial: Dict):
        updated = self.store.update(block_id, partial)
        self._activate(block_id)
        return updated

    def update_styles(self, block_id: str, partial: Dict):
        updated = self.store.update_styles(block_id, partial)
        self._activate(block_id)
        return updated

    def move_block(self, block_id: str, direction: str) -> bool:
        return self.store.move(block_id, direction)

    def reorder_block(self, block_id: str, target_index: int) -> bool:
        return self.store.reorder(block_id, target_index)

    def undo(self) -> bool:
        return self.store.undo()

    # ---------- suppression ----------

    def request_remove(self, block_id: str) -> str:
        block = self.store.get(block_id)
        if block is None:
            return "noop"
        if has_content(block):
            self.pending_delete_id = block_id
            return "pending_confirmation"
        self.store.remove(block_id)
        return "removed"

    def confirm_remove(self) -> bool:
        block_id = self.pending_delete_id
        if block_id is None:
            return False
        self.pending_delete_id = None
        return self.store.remove(block_id)

    def cancel_remove(self) -> None:
        self.pending_delete_id = None

    # ---------- réglages de page ----------

    def update_settings(self, **changes) -> PageSettings:
        try:
            update = PageSettingsUpdate(**changes)
        except ValidationError as e:
            raise ValidationFailed(str(e)) from e

        data = self.settings.model_dump()
        for key in update.model_fields_set:
            value = getattr(update, key)
            if key in ("title_styles", "subtitle_styles"):
                # fusion : seuls les champs envoyés remplacent les surcharges existantes
                data[key] = {**data[key], **value.model_dump(exclude_unset=True)} if value else {}
            else:
                data[key] = value

        try:
            self.settings = PageSettings.model_validate(data)
        except ValidationError as e:
            raise ValidationFailed(str(e)) from e
        self._emit(SETTINGS_CHANGED)
        return self.settings

    # ---------- upload d'image ----------

    def upload_image(self, block_id: str, filename: str, content_type: Optional[str], data: bytes,
                     blob_store: BlobStore, owner_id: int,
                     on_progress: Optional[ProgressCallback] = None) -> Optional[str]:
        block = self.store.get(block_id)
        if block is None or block.type != "image":
            raise ValidationFailed(f"Block {block_id} is not an image block")

        try:
            validate_image(content_type, len(data))
        except ValidationFailed as e:
            self.last_error = str(e)
            raise

        try:
            url = blob_store.upload(content_image_path(owner_id, filename), data, on_progress)
        except CollaboratorError:
            logger.error(f"Image upload failed for block {block_id}")
            self.last_error = UPLOAD_FAILED_MESSAGE
            raise

        self.last_error = None
        if self.store.get(block_id) is None:
            # bloc supprimé pendant l'upload
            logger.info(f"Block {block_id} removed before upload completed, url dropped")
            return url

        self.update_block(block_id, {"url": url})
        return url

    # ---------- état pour l'API ----------

    def state(self, product_id: str) -> EditorState:
        return EditorState(
            product_id=product_id,
            blocks=self.store.blocks,
            settings=self.settings,
            selected_block_id=self.selected_block_id,
            active_block_id=self.active_block_id,
            scroll_trigger=self.scroll_trigger,
            pending_delete_id=self.pending_delete_id,
            can_undo=self.can_undo,
            has_unsaved_changes=self.has_unsaved_changes,
            last_error=self.last_error,
        )
