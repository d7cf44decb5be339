"""
Page produit publique (lien partagé par le créateur), sans authentification.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.errors import DocumentNotFound, ProductUnavailable
from app.schemas.product import PublicProduct
from app.services import product_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/p", tags=["public"])


def _show(store: DocumentStore, seller_id: int, product_id: str) -> PublicProduct:
    try:
        return product_service.view_public_product(store, seller_id, product_id)
    except DocumentNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    except ProductUnavailable:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Product is not available")

# déclarée avant /{seller_id}/{product_id} qui capterait aussi /by-slug/...
@router.get("/by-slug/{slug}", response_model=PublicProduct)
def product_by_slug(slug: str, db: Session = Depends(get_db)):
    store = DocumentStore(db)
    try:
        seller_id, product_id = product_service.resolve_slug(store, slug)
    except DocumentNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return _show(store, seller_id, product_id)

@router.get("/{seller_id}/{product_id}", response_model=PublicProduct)
def product_page(seller_id: int, product_id: str, db: Session = Depends(get_db)):
    """Produit publié uniquement ; compte une vue"""
    return _show(DocumentStore(db), seller_id, product_id)
