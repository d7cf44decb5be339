# IMPORTS
import logging
import re
import time
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from app.core.errors import DocumentNotFound, ProductUnavailable, SlugTaken
from app.schemas.product import ProductCreate, ProductResponse, ProductUpdate, PublicProduct
from app.services.blob_store import BlobStore, delivery_file_path, validate_file
from app.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

MAX_SLUG_LENGTH = 50
MAX_SLUG_SUFFIX = 100


def product_path(owner_id: int, product_id: str) -> str:
    return f"users/{owner_id}/products/{product_id}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while number:
        number, rest = divmod(number, 36)
        out = digits[rest] + out
    return out or "0"


# ============ SLUGS ============

def slugify(name: str) -> str:
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug[:MAX_SLUG_LENGTH]


def _slug_available(store: DocumentStore, slug: str, product_id: Optional[str]) -> bool:
    existing = store.get(f"slugs/{slug}")
    return existing is None or existing.get("productId") == product_id


def generate_unique_slug(store: DocumentStore, name: str, product_id: Optional[str] = None) -> str:
    """slug, slug-2 ... slug-100, puis slug-<timestamp base36> ; "" si le nom ne donne rien"""
    base = slugify(name)
    if not base:
        return ""

    slug = base
    suffix = 1
    while suffix <= MAX_SLUG_SUFFIX:
        if _slug_available(store, slug, product_id):
            return slug
        suffix += 1
        slug = f"{base}-{suffix}"

    return f"{base}-{_base36(int(time.time() * 1000))}"


def _claim_slug(store: DocumentStore, slug: str, owner_id: int, product_id: str) -> None:
    existing = store.get(f"slugs/{slug}")
    if existing and existing.get("productId") != product_id:
        raise SlugTaken("This URL is already taken")
    store.set(f"slugs/{slug}", {
        "productId": product_id,
        "userId": owner_id,
        "createdAt": existing.get("createdAt") if existing else _now(),
        "lastUpdated": _now(),
    })


def _release_slug(store: DocumentStore, slug: Optional[str], product_id: str) -> None:
    if not slug:
        return
    existing = store.get(f"slugs/{slug}")
    if existing and existing.get("productId") == product_id:
        store.delete(f"slugs/{slug}")


# ============ PRODUITS ============

def to_response(product_id: str, data: Dict) -> ProductResponse:
    hosted = (data.get("delivery") or {}).get("hosted") or {}
    return ProductResponse(
        id=product_id,
        title=data.get("title") or "",
        description=data.get("description") or "",
        price=data.get("price") or 0,
        currency=data.get("currency") or "usd",
        slug=data.get("slug"),
        published=bool(data.get("published")),
        views=data.get("views", 0),
        sales=data.get("sales", 0),
        files=hosted.get("files", []),
        has_custom_content=hosted.get("hasCustomContent", False),
        created_at=data.get("createdAt"),
        last_updated=data.get("lastUpdated"),
    )


def get_product(store: DocumentStore, owner_id: int, product_id: str) -> Dict:
    data = store.get(product_path(owner_id, product_id))
    if data is None:
        raise DocumentNotFound(product_path(owner_id, product_id))
    return data


def list_products(store: DocumentStore, owner_id: int) -> List[ProductResponse]:
    return [to_response(row["id"], row["data"]) for row in store.list(f"users/{owner_id}/products")]


def create_product(store: DocumentStore, owner_id: int, product_data: ProductCreate) -> ProductResponse:
    product_id = uuid.uuid4().hex[:20]

    # slug explicite : doit être libre ; sinon généré à partir du titre
    slug = slugify(product_data.slug or "") or generate_unique_slug(store, product_data.title, product_id)
    if slug:
        _claim_slug(store, slug, owner_id, product_id)

    data = {
        "title": product_data.title,
        "description": product_data.description,
        "price": product_data.price,
        "currency": product_data.currency,
        "slug": slug or None,
        "published": False,
        "views": 0,
        "sales": 0,
        "createdAt": _now(),
        "lastUpdated": _now(),
        "delivery": {"type": "hosted", "hosted": {"files": []}},
    }
    store.set(product_path(owner_id, product_id), data)
    logger.info(f"Product {product_id} created for user {owner_id} (slug={slug})")
    return to_response(product_id, data)


def update_product(store: DocumentStore, owner_id: int, product_id: str, changes: ProductUpdate) -> ProductResponse:
    data = get_product(store, owner_id, product_id)
    # null explicite = champ non modifié (sauf slug : null retire le slug)
    fields = {k: v for k, v in changes.model_dump(exclude_unset=True).items() if v is not None or k == "slug"}

    if "slug" in fields:
        new_slug = slugify(fields["slug"] or "")
        if new_slug != data.get("slug"):
            if new_slug:
                # vérifie AVANT de libérer l'ancien
                _claim_slug(store, new_slug, owner_id, product_id)
            _release_slug(store, data.get("slug"), product_id)
        fields["slug"] = new_slug or None

    fields["lastUpdated"] = _now()
    data = store.set(product_path(owner_id, product_id), fields, merge=True)
    return to_response(product_id, data)


def delete_product(store: DocumentStore, owner_id: int, product_id: str) -> None:
    data = get_product(store, owner_id, product_id)
    _release_slug(store, data.get("slug"), product_id)
    store.delete(product_path(owner_id, product_id))
    logger.info(f"Product {product_id} deleted")


# ============ PAGE PUBLIQUE ============

def resolve_slug(store: DocumentStore, slug: str) -> Tuple[int, str]:
    """slugs/{slug} -> (seller_id, product_id)"""
    entry = store.get(f"slugs/{slug}")
    if not entry or "productId" not in entry:
        raise DocumentNotFound(f"slugs/{slug}")
    return int(entry["userId"]), entry["productId"]


def view_public_product(store: DocumentStore, seller_id: int, product_id: str) -> PublicProduct:
    """Produit publié uniquement ; chaque affichage compte une vue"""
    data = get_product(store, seller_id, product_id)
    if not data.get("published"):
        raise ProductUnavailable(product_id)

    data = store.update(product_path(seller_id, product_id), {"views": (data.get("views") or 0) + 1})
    hosted = (data.get("delivery") or {}).get("hosted") or {}
    return PublicProduct(
        id=product_id,
        seller_id=seller_id,
        title=data.get("title") or "",
        description=data.get("description") or "",
        price=data.get("price") or 0,
        currency=data.get("currency") or "usd",
        slug=data.get("slug"),
        has_custom_content=hosted.get("hasCustomContent", False),
    )




# ============ FICHIERS DE LIVRAISON ============

def add_delivery_file(store: DocumentStore, blob_store: BlobStore, owner_id: int, product_id: str,
                      filename: str, content_type: Optional[str], data: bytes) -> Dict:
    product = get_product(store, owner_id, product_id)
    validate_file(len(data))

    url = blob_store.upload(delivery_file_path(owner_id, product_id, filename), data)
    entry = {
        "id": f"file_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}",
        "url": url,
        "name": filename,
        "size": len(data),
        "type": content_type or "application/octet-stream",
        "uploadedAt": _now(),
    }

    files = ((product.get("delivery") or {}).get("hosted") or {}).get("files", [])
    store.update(product_path(owner_id, product_id), {
        "delivery.hosted.files": files + [entry],
        "lastUpdated": _now(),
    })
    return entry


def remove_delivery_file(store: DocumentStore, blob_store: BlobStore, owner_id: int, product_id: str,
                         file_id: str) -> bool:
    product = get_product(store, owner_id, product_id)
    files = ((product.get("delivery") or {}).get("hosted") or {}).get("files", [])
    entry = next((f for f in files if f.get("id") == file_id), None)
    if entry is None:
        return False

    blob_path = blob_store.path_from_url(entry["url"])
    if blob_path:
        blob_store.delete(blob_path)

    store.update(product_path(owner_id, product_id), {
        "delivery.hosted.files": [f for f in files if f.get("id") != file_id],
        "lastUpdated": _now(),
    })
    return True
