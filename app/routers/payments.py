from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.core.auth import get_current_user
from app.core.database import get_db
from app.core.errors import CollaboratorError, DocumentNotFound, ValidationFailed
from app.models.user import User
from app.schemas.payment import (
    CheckoutRequest, CheckoutResponse, ConnectRequest, ConnectResponse, ConnectUrlRequest, ConnectUrlResponse,
)
from app.services import payment_service
from app.services.document_store import DocumentStore

router = APIRouter(prefix="/stripe", tags=["payments"])

@router.post("/connect-url", response_model=ConnectUrlResponse)
def connect_url(body: ConnectUrlRequest, current_user: User = Depends(get_current_user)):
    try:
        return {"url": payment_service.build_connect_url(current_user.id, body.return_url)}
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/connect", response_model=ConnectResponse)
def connect(body: ConnectRequest, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    # retour OAuth : échange du code contre le compte connecté
    try:
        return payment_service.connect_account(db, DocumentStore(db), current_user, body.code)
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.post("/checkout-session", response_model=CheckoutResponse)
def checkout_session(body: CheckoutRequest, db: Session = Depends(get_db)):
    """Public : l'acheteur n'a pas de compte"""
    try:
        url = payment_service.create_checkout_session(DocumentStore(db), body.product_id, body.seller_id, body.origin)
    except DocumentNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    except ValidationFailed as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return {"url": url}
