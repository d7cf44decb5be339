# IMPORTS
import copy
import logging
import re
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from app.core.errors import DocumentNotFound
from app.models.document import Document

logger = logging.getLogger(__name__)

_OWNER_RE = re.compile(r"^users/(\d+)(?:/|$)")


def _owner_from_path(path: str) -> Optional[int]:
    match = _OWNER_RE.match(path)
    return int(match.group(1)) if match else None


def _deep_merge(base: Dict, changes: Dict) -> Dict:
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _set_dotted(data: Dict, dotted: str, value: Any) -> None:
    # "delivery.hosted.contentBlocks" -> data["delivery"]["hosted"]["contentBlocks"]
    keys = dotted.split(".")
    node = data
    for key in keys[:-1]:
        if not isinstance(node.get(key), dict):
            node[key] = {}
        node = node[key]
    node[keys[-1]] = value


class DocumentStore:
    """
    Documents JSON adressés par chemin (users/{uid}, users/{uid}/products/{pid}, slugs/{slug}).
    Le champ JSON est toujours réassigné avec une copie pour que SQLAlchemy détecte le changement.
    """

    def __init__(self, db: Session):
        self.db = db

    def _row(self, path: str) -> Optional[Document]:
        return self.db.query(Document).filter(Document.path == path).first()

    def get(self, path: str) -> Optional[Dict]:
        row = self._row(path)
        if not row:
            return None
        return copy.deepcopy(row.data or {})

    def set(self, path: str, data: Dict, merge: bool = False) -> Dict:
        row = self._row(path)
        if row is None:
            row = Document(path=path, owner_id=_owner_from_path(path), data=copy.deepcopy(data))
            self.db.add(row)
        elif merge:
            row.data = _deep_merge(copy.deepcopy(row.data or {}), data)
        else:
            row.data = copy.deepcopy(data)

        self.db.commit()
        self.db.refresh(row)
        return copy.deepcopy(row.data)

    def update(self, path: str, fields: Dict[str, Any]) -> Dict:
        """Maj de champs par chemin pointé ; le document doit exister"""
        row = self._row(path)
        if row is None:
            raise DocumentNotFound(path)

        data = copy.deepcopy(row.data or {})
        for dotted, value in fields.items():
            _set_dotted(data, dotted, value)
        row.data = data

        self.db.commit()
        self.db.refresh(row)
        return copy.deepcopy(row.data)

    def delete(self, path: str) -> bool:
        row = self._row(path)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def list(self, prefix: str) -> List[Dict]:
        """Enfants directs d'une collection, ex: list("users/1/products")"""
        prefix = prefix.rstrip("/") + "/"
        rows = self.db.query(Document).filter(Document.path.startswith(prefix)).order_by(Document.created_at, Document.id).all()
        # uniquement le niveau immédiat
        return [
            {"path": row.path, "id": row.path[len(prefix):], "data": copy.deepcopy(row.data or {})}
            for row in rows
            if "/" not in row.path[len(prefix):]
        ]
