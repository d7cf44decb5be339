"""
Block store - séquence ordonnée de blocs de contenu.

Chaque mutation pousse d'abord une copie de la séquence dans l'historique,
puis notifie les abonnés (prévisualisation, session d'éditeur).
"""

import logging
import random
import string
import time
from typing import Callable, Dict, Iterator, List, Optional, Tuple
from pydantic import ValidationError
from app.core.errors import BlockFieldError
from app.schemas.block import (
    BLOCK_MODELS, PAYLOAD_FIELDS, STYLE_FIELDS, BlockSequence, BlockStyles,
)
from app.services.history import DEFAULT_LIMIT, UndoHistory

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits

Listener = Callable[[List], None]


# ============ FONCTIONS ============

def generate_block_id() -> str:
    """block_<timestamp ms>_<9 caractères base36>"""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"block_{int(time.time() * 1000)}_{suffix}"


def has_content(block) -> bool:
    """
    Vrai si un champ texte/url du bloc est non vide après trim.
    Sert uniquement à décider si la suppression demande une confirmation.
    """
    if block.type == "divider":
        return False
    if block.type == "list":
        return any(item.strip() for item in block.items)
    if block.type in ("video", "image"):
        return bool(block.url.strip() or (block.caption or "").strip())
    return bool(block.content.strip())


def dumps_blocks(blocks: List) -> str:
    return BlockSequence.dump_json(list(blocks), exclude_none=True).decode()


def loads_blocks(text: Optional[str]) -> List:
    """Parse le champ sérialisé. Lève ValueError si le JSON est invalide ou si un id est dupliqué"""
    if not text:
        return []
    blocks = BlockSequence.validate_json(text)
    seen = set()
    for block in blocks:
        if block.id in seen:
            raise ValueError(f"Duplicate block id: {block.id}")
        seen.add(block.id)
    return blocks


def _check_fields(kind: str, partial: Dict, allowed: Dict[str, Tuple[str, ...]], label: str) -> None:
    unknown = sorted(set(partial) - set(allowed[kind]))
    if unknown:
        raise BlockFieldError(f"{label} field(s) {', '.join(unknown)} not allowed on '{kind}' blocks")


def _merge_styles(current: Dict, partial: Dict) -> Dict:
    # merge superficiel, sauf "caption" fusionné sur un niveau ; None retire la surcharge
    merged = dict(current)
    for key, value in partial.items():
        if value is None:
            merged.pop(key, None)
        elif key == "caption" and isinstance(value, dict):
            caption = dict(merged.get("caption") or {})
            for sub_key, sub_value in value.items():
                if sub_value is None:
                    caption.pop(sub_key, None)
                else:
                    caption[sub_key] = sub_value
            if caption:
                merged["caption"] = caption
            else:
                merged.pop("caption", None)
        else:
            merged[key] = value
    return merged


# ============ STORE ============

class BlockStore:
    def __init__(self, blocks: Optional[List] = None, history_limit: int = DEFAULT_LIMIT):
        self._blocks = list(blocks or [])
        self.history = UndoHistory(history_limit)
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator:
        return iter(list(self._blocks))

    @property
    def blocks(self) -> List:
        return list(self._blocks)

    def get(self, block_id: str):
        return next((b for b in self._blocks if b.id == block_id), None)

    def index_of(self, block_id: str) -> int:
        for index, block in enumerate(self._blocks):
            if block.id == block_id:
                return index
        return -1

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _commit(self, blocks: List) -> None:
        self._blocks = blocks
        for listener in list(self._listeners):
            listener(self.blocks)

    def _new_id(self) -> str:
        ids = {b.id for b in self._blocks}
        block_id = generate_block_id()
        while block_id in ids:
            block_id = generate_block_id()
        return block_id

    # ---------- mutations ----------

    def add(self, kind: str):
        model = BLOCK_MODELS.get(kind)
        if model is None:
            raise BlockFieldError(f"Unknown block type: {kind}")

        block = model(id=self._new_id())
        self.history.snapshot(self._blocks)
        self._commit(self._blocks + [block])
        return block

    def update(self, block_id: str, partial: Dict):
        block = self.get(block_id)
        if block is None:
            # id inconnu : no-op, le snapshot est quand même pris
            logger.debug(f"update ignored, unknown block {block_id}")
            self.history.snapshot(self._blocks)
            return None

        _check_fields(block.type, partial, PAYLOAD_FIELDS, "payload")
        data = block.model_dump()
        data.update(partial)
        try:
            updated = BLOCK_MODELS[block.type].model_validate(data)
        except ValidationError as e:
            raise BlockFieldError(str(e)) from e

        self.history.snapshot(self._blocks)
        self._commit([updated if b.id == block_id else b for b in self._blocks])
        return updated

    def update_styles(self, block_id: str, partial: Dict):
        block = self.get(block_id)
        if block is None:
            logger.debug(f"update_styles ignored, unknown block {block_id}")
            self.history.snapshot(self._blocks)
            return None

        _check_fields(block.type, partial, STYLE_FIELDS, "style")
        current = block.styles.model_dump(exclude_none=True) if block.styles else {}
        merged = _merge_styles(current, partial)
        try:
            styles = BlockStyles.model_validate(merged) if merged else None
        except ValidationError as e:
            raise BlockFieldError(str(e)) from e

        updated = block.model_copy(update={"styles": styles})
        self.history.snapshot(self._blocks)
        self._commit([updated if b.id == block_id else b for b in self._blocks])
        return updated

    def remove(self, block_id: str) -> bool:
        if self.index_of(block_id) == -1:
            return False
        self.history.snapshot(self._blocks)
        self._commit([b for b in self._blocks if b.id != block_id])
        return True

    def move(self, block_id: str, direction: str) -> bool:
        """Echange avec le voisin ; no-op (sans snapshot) aux bornes"""
        index = self.index_of(block_id)
        if index == -1:
            return False
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(self._blocks):
            return False

        blocks = list(self._blocks)
        blocks[index], blocks[target] = blocks[target], blocks[index]
        self.history.snapshot(self._blocks)
        self._commit(blocks)
        return True

    def reorder(self, block_id: str, target_index: int) -> bool:
        """Glisser-déposer : place le bloc à target_index"""
        index = self.index_of(block_id)
        if index == -1:
            return False
        target = max(0, min(target_index, len(self._blocks) - 1))
        if target == index:
            return False

        blocks = list(self._blocks)
        block = blocks.pop(index)
        blocks.insert(target, block)
        self.history.snapshot(self._blocks)
        self._commit(blocks)
        return True

    def undo(self) -> bool:
        previous = self.history.undo()
        if previous is None:
            return False
        with self.history.restoring():
            self._commit(previous)
        return True

    def to_json(self) -> str:
        return dumps_blocks(self._blocks)
