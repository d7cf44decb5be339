"""
Sessions d'édition du contenu hébergé (delivery.hosted) d'un produit.

Une session par (owner_id, product_id), gardée en mémoire entre deux requêtes.
Le document n'est écrit que sur sauvegarde explicite.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Tuple
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from app.core.config import settings
from app.core.errors import CollaboratorError
from app.schemas.page import PageSettings
from app.services.block_store import loads_blocks
from app.services.document_store import DocumentStore
from app.services.editor import EditorSession
from app.services.product_service import get_product, product_path

logger = logging.getLogger(__name__)

_sessions: Dict[Tuple[int, str], EditorSession] = {}


def _hosted(product: Dict) -> Dict:
    return (product.get("delivery") or {}).get("hosted") or {}


def _load(store: DocumentStore, owner_id: int, product_id: str) -> EditorSession:
    hosted = _hosted(get_product(store, owner_id, product_id))

    try:
        blocks = loads_blocks(hosted.get("contentBlocks"))
    except ValueError as e:
        # séquence illisible : on ouvre l'éditeur vide plutôt que de le casser
        logger.error(f"Malformed content blocks for product {product_id}: {e}")
        blocks = []

    try:
        page_settings = PageSettings.model_validate(hosted.get("pageSettings") or {})
    except ValidationError as e:
        logger.error(f"Malformed page settings for product {product_id}: {e}")
        page_settings = PageSettings()

    return EditorSession(blocks, page_settings, history_limit=settings.UNDO_HISTORY_LIMIT)


def open_session(store: DocumentStore, owner_id: int, product_id: str) -> EditorSession:
    """(Re)charge la session depuis le document, les modifications non sauvegardées sont perdues"""
    session = _load(store, owner_id, product_id)
    _sessions[(owner_id, product_id)] = session
    logger.info(f"Content session opened for product {product_id} ({len(session.blocks)} blocks)")
    return session


def get_session(store: DocumentStore, owner_id: int, product_id: str) -> EditorSession:
    session = _sessions.get((owner_id, product_id))
    if session is None:
        session = open_session(store, owner_id, product_id)
    return session


def save_session(store: DocumentStore, owner_id: int, product_id: str) -> EditorSession:
    session = get_session(store, owner_id, product_id)
    blocks = session.blocks

    try:
        store.update(product_path(owner_id, product_id), {
            "delivery.hosted.contentBlocks": session.store.to_json(),
            "delivery.hosted.pageSettings": session.settings.model_dump(),
            "delivery.hosted.hasCustomContent": len(blocks) > 0,
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        })
    except SQLAlchemyError as e:
        store.db.rollback()
        logger.error(f"Failed to save content for product {product_id}: {e}")
        # l'état en mémoire reste intact pour réessayer
        raise CollaboratorError("Failed to save content. Please try again.") from e

    session.mark_saved()
    logger.info(f"Content saved for product {product_id} ({len(blocks)} blocks)")
    return session


def close_session(owner_id: int, product_id: str) -> bool:
    return _sessions.pop((owner_id, product_id), None) is not None


def clear_sessions() -> None:
    _sessions.clear()
