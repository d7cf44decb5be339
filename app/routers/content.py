"""
Router de l'éditeur de contenu (page de livraison hébergée d'un produit).

La session vit en mémoire entre les requêtes ; rien n'est écrit avant POST /save.
Chaque réponse renvoie l'état complet de l'éditeur.
"""

from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from app.core.auth import get_current_user
from app.core.database import get_db
from app.core.errors import BlockFieldError, CollaboratorError, DocumentNotFound, ValidationFailed
from app.models.user import User
from app.schemas.block import BlockCreate, BlockMove, BlockReorder, BlockUpdate
from app.schemas.content import (
    EditorState, LivePreview, PaletteResponse, RemoveResponse, SaveResponse, UploadResponse,
)
from app.schemas.page import PageSettingsUpdate
from app.services import content_service, preview, product_service
from app.services.blob_store import BlobStore, get_blob_store
from app.services.document_store import DocumentStore
from app.services.editor import EditorSession
from app.services.style_resolver import default_color

router = APIRouter(prefix="/products/{product_id}/content", tags=["content"])


def _session(product_id: str, db: Session, user: User) -> EditorSession:
    try:
        return content_service.get_session(DocumentStore(db), user.id, product_id)
    except DocumentNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")


def _product_title(db: Session, user: User, product_id: str) -> str:
    try:
        return product_service.get_product(DocumentStore(db), user.id, product_id).get("title", "")
    except DocumentNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")


def _bad_request(e: ValidationFailed) -> HTTPException:
    # champ d'un autre type de bloc : 422, le reste : 400
    code = status.HTTP_422_UNPROCESSABLE_ENTITY if isinstance(e, BlockFieldError) else status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(e))

# ========== SESSION ==========

@router.post("", response_model=EditorState)
def open_editor(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """(Re)charge depuis le document, les modifications non sauvegardées sont perdues"""
    try:
        session = content_service.open_session(DocumentStore(db), current_user.id, product_id)
    except DocumentNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return session.state(product_id)

@router.get("", response_model=EditorState)
def get_editor(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _session(product_id, db, current_user).state(product_id)

@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def close_editor(product_id: str, current_user: User = Depends(get_current_user)):
    content_service.close_session(current_user.id, product_id)

# ========== BLOCS ==========

@router.post("/blocks", response_model=EditorState, status_code=status.HTTP_201_CREATED)
def add_block(product_id: str, body: BlockCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = _session(product_id, db, current_user)
    try:
        session.add_block(body.kind)
    except ValidationFailed as e:
        raise _bad_request(e)
    return session.state(product_id)

@router.patch("/blocks/{block_id}", response_model=EditorState)
def update_block(product_id: str, block_id: str, body: BlockUpdate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = _session(product_id, db, current_user)
    try:
        session.update_block(block_id, body.model_dump(exclude_unset=True))
    except ValidationFailed as e:
        raise _bad_request(e)
    return session.state(product_id)

@router.patch("/blocks/{block_id}/styles", response_model=EditorState)
def update_block_styles(
    product_id: str,
    block_id: str,
    styles: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Fusion avec les surcharges existantes ; une valeur null retire la surcharge"""
    session = _session(product_id, db, current_user)
    try:
        session.update_styles(block_id, styles)
    except ValidationFailed as e:
        raise _bad_request(e)
    return session.state(product_id)

@router.post("/blocks/{block_id}/select", response_model=EditorState)
def select_block(product_id: str, block_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = _session(product_id, db, current_user)
    session.select(block_id)
    return session.state(product_id)

@router.post("/blocks/{block_id}/move", response_model=EditorState)
def move_block(product_id: str, block_id: str, body: BlockMove, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    # aux bornes : no-op silencieux
    session = _session(product_id, db, current_user)
    session.move_block(block_id, body.direction)
    return session.state(product_id)

@router.post("/blocks/{block_id}/reorder", response_model=EditorState)
def reorder_block(product_id: str, block_id: str, body: BlockReorder, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = _session(product_id, db, current_user)
    session.reorder_block(block_id, body.target_index)
    return session.state(product_id)

@router.delete("/blocks/{block_id}", response_model=RemoveResponse)
def remove_block(product_id: str, block_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Bloc avec contenu -> pending_confirmation, sinon supprimé tout de suite"""
    session = _session(product_id, db, current_user)
    result = session.request_remove(block_id)
    return RemoveResponse(status=result, state=session.state(product_id))

@router.post("/blocks/{block_id}/image", response_model=UploadResponse)
def upload_block_image(
    product_id: str,
    block_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    current_user: User = Depends(get_current_user)
):
    session = _session(product_id, db, current_user)
    data = file.file.read()
    try:
        url = session.upload_image(block_id, file.filename, file.content_type, data, blob_store, current_user.id)
    except ValidationFailed as e:
        raise _bad_request(e)
    except CollaboratorError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=session.last_error)
    return UploadResponse(url=url, state=session.state(product_id))

# ========== SUPPRESSION ==========

@router.post("/delete/confirm", response_model=RemoveResponse)
def confirm_delete(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = _session(product_id, db, current_user)
    removed = session.confirm_remove()
    return RemoveResponse(status="removed" if removed else "noop", state=session.state(product_id))

@router.post("/delete/cancel", response_model=EditorState)
def cancel_delete(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = _session(product_id, db, current_user)
    session.cancel_remove()
    return session.state(product_id)

# ========== HISTORIQUE ==========

@router.post("/undo", response_model=EditorState)
def undo(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    # historique vide : no-op
    session = _session(product_id, db, current_user)
    session.undo()
    return session.state(product_id)

# ========== REGLAGES DE PAGE ==========

@router.patch("/settings", response_model=EditorState)
def update_settings(product_id: str, body: PageSettingsUpdate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = _session(product_id, db, current_user)
    try:
        session.update_settings(**body.model_dump(exclude_unset=True))
    except ValidationFailed as e:
        raise _bad_request(e)
    return session.state(product_id)

@router.get("/palette", response_model=PaletteResponse)
def palette(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Couleurs de fond proposées pour le thème courant"""
    session = _session(product_id, db, current_user)
    theme = session.settings.theme
    return PaletteResponse(theme=theme, colors=session.palette(), default=default_color(theme, "page_background"))

# ========== SAUVEGARDE ==========

@router.post("/save", response_model=SaveResponse)
def save(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    _session(product_id, db, current_user)
    try:
        session = content_service.save_session(DocumentStore(db), current_user.id, product_id)
    except DocumentNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    except CollaboratorError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return SaveResponse(saved=True, state=session.state(product_id))

# ========== PREVISUALISATION ==========

@router.get("/preview", response_model=LivePreview)
def live_preview(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = _session(product_id, db, current_user)
    return preview.render_live(
        session.blocks,
        session.settings,
        active_block_id=session.active_block_id,
        scroll_trigger=session.scroll_trigger,
        product_name=_product_title(db, current_user, product_id),
    )

@router.get("/preview.html", response_class=HTMLResponse)
def standalone_preview(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Document HTML autonome ("ouvrir dans un nouvel onglet")"""
    session = _session(product_id, db, current_user)
    html = preview.render_standalone(session.blocks, session.settings, _product_title(db, current_user, product_id))
    return HTMLResponse(content=html)
