"""
Stripe Connect : connexion du compte vendeur et paiement des produits.

Le vendeur est payé par destination charge, la plateforme garde une commission
(application_fee_amount) calculée côté serveur.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Dict, Optional
from urllib.parse import urlencode
import stripe
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.errors import CollaboratorError, DocumentNotFound, ValidationFailed
from app.models.user import User
from app.services.document_store import DocumentStore
from app.services.product_service import product_path

logger = logging.getLogger(__name__)

STRIPE_AUTHORIZE_URL = "https://connect.stripe.com/oauth/authorize"


def _stripe():
    stripe.api_key = settings.STRIPE_SECRET_KEY
    if not stripe.api_key:
        raise CollaboratorError("STRIPE_SECRET_KEY is not configured")
    return stripe


def platform_fee(price: int, rate: Optional[float] = None) -> int:
    """Commission en centimes, arrondi au demi supérieur (0.5 -> 1)"""
    rate = settings.PLATFORM_FEE_RATE if rate is None else rate
    return int(math.floor(price * rate + 0.5))


# ============ CONNECT ============

def build_connect_url(user_id: int, return_url: str) -> str:
    if not return_url:
        raise ValidationFailed("return_url is required")
    query = urlencode({
        "response_type": "code",
        "client_id": settings.STRIPE_CLIENT_ID,
        "scope": "read_write",
        "redirect_uri": return_url,
        "state": str(user_id),
    })
    return f"{STRIPE_AUTHORIZE_URL}?{query}"


def connect_account(db: Session, store: DocumentStore, user: User, code: str) -> Dict:
    """Echange le code OAuth, récupère le compte et l'enregistre sur l'utilisateur"""
    if not code:
        raise ValidationFailed("Missing code")

    s = _stripe()
    try:
        response = s.OAuth.token(grant_type="authorization_code", code=code)
        account_id = response["stripe_user_id"]
        account = s.Account.retrieve(account_id)
    except stripe.StripeError as e:
        logger.error(f"Stripe connect failed for user {user.id}: {e}")
        raise CollaboratorError(str(e) or "Failed to connect Stripe account") from e

    details = {
        "email": account.get("email"),
        "country": account.get("country"),
        "defaultCurrency": account.get("default_currency"),
        "chargesEnabled": account.get("charges_enabled", False),
        "payoutsEnabled": account.get("payouts_enabled", False),
    }

    user.stripe_connected = True
    user.stripe_account_id = account_id
    user.stripe_connected_at = datetime.now(timezone.utc)
    db.commit()

    store.set(f"users/{user.id}", {
        "stripeConnected": True,
        "stripeAccountId": account_id,
        "stripeAccountDetails": details,
        "stripeConnectedAt": user.stripe_connected_at.isoformat(),
    }, merge=True)

    logger.info(f"User {user.id} connected Stripe account {account_id}")
    return {
        "success": True,
        "account_id": account_id,
        "charges_enabled": details["chargesEnabled"],
        "payouts_enabled": details["payoutsEnabled"],
    }


# ============ CHECKOUT ============

def create_checkout_session(store: DocumentStore, product_id: str, seller_id: int,
                            origin: Optional[str] = None) -> str:
    product = store.get(product_path(seller_id, product_id))
    if product is None:
        raise DocumentNotFound(product_path(seller_id, product_id))

    seller = store.get(f"users/{seller_id}") or {}
    account_id = seller.get("stripeAccountId")
    if not account_id:
        raise ValidationFailed("Seller not connected to Stripe")

    base = (origin or settings.DEFAULT_ORIGIN).rstrip("/")
    price = int(product.get("price", 0))

    s = _stripe()
    try:
        session = s.checkout.Session.create(
            payment_method_types=["card"],
            line_items=[{
                "price_data": {
                    "currency": product.get("currency", "usd"),
                    "product_data": {
                        "name": product.get("title", ""),
                        "description": product.get("description") or None,
                    },
                    "unit_amount": price,
                },
                "quantity": 1,
            }],
            mode="payment",
            success_url=f"{base}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base}/p/{seller_id}/{product_id}",
            payment_intent_data={
                "application_fee_amount": platform_fee(price),
                "transfer_data": {"destination": account_id},
            },
            metadata={"productId": product_id, "sellerId": str(seller_id)},
        )
    except stripe.StripeError as e:
        logger.error(f"Checkout session failed for product {product_id}: {e}")
        raise CollaboratorError(str(e) or "Failed to create checkout session") from e

    logger.info(f"Checkout session {session.id} created for product {product_id}")
    return session.url
