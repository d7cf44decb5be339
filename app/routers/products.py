from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session
from typing import List
from app.core.auth import get_current_user
from app.core.database import get_db
from app.core.errors import CollaboratorError, DocumentNotFound, SlugTaken, ValidationFailed
from app.models.user import User
from app.schemas.product import DeliveryFile, ProductCreate, ProductResponse, ProductUpdate
from app.services import content_service, product_service
from app.services.blob_store import BlobStore, get_blob_store
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/products", tags=["products"])

def _not_found():
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

# Crée un produit (slug généré depuis le titre si absent)
@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(product_data: ProductCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        return product_service.create_product(DocumentStore(db), current_user.id, product_data)
    except SlugTaken as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.get("", response_model=List[ProductResponse])
def list_products(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return product_service.list_products(DocumentStore(db), current_user.id)

@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        data = product_service.get_product(DocumentStore(db), current_user.id, product_id)
    except DocumentNotFound:
        raise _not_found()
    return product_service.to_response(product_id, data)

@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(product_id: str, changes: ProductUpdate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        return product_service.update_product(DocumentStore(db), current_user.id, product_id, changes)
    except DocumentNotFound:
        raise _not_found()
    except SlugTaken as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    try:
        product_service.delete_product(DocumentStore(db), current_user.id, product_id)
    except DocumentNotFound:
        raise _not_found()
    # une session d'édition ouverte n'a plus de document derrière
    content_service.close_session(current_user.id, product_id)

# ========== FICHIERS DE LIVRAISON ==========

@router.post("/{product_id}/files", response_model=DeliveryFile, status_code=status.HTTP_201_CREATED)
def upload_delivery_file(
    product_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    current_user: User = Depends(get_current_user)
):
    data = file.file.read()
    try:
        return product_service.add_delivery_file(
            DocumentStore(db), blob_store, current_user.id, product_id, file.filename, file.content_type, data
        )
    except DocumentNotFound:
        raise _not_found()
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

@router.delete("/{product_id}/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_delivery_file(
    product_id: str,
    file_id: str,
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    current_user: User = Depends(get_current_user)
):
    try:
        removed = product_service.remove_delivery_file(DocumentStore(db), blob_store, current_user.id, product_id, file_id)
    except DocumentNotFound:
        raise _not_found()
    except CollaboratorError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
