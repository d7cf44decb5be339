from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

# Produits du créateur (documents users/{uid}/products/{pid})

class ProductCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    price: int = Field(default=0, ge=0)  # en centimes
    currency: str = "usd"
    slug: Optional[str] = None

class ProductUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = None
    slug: Optional[str] = None
    published: Optional[bool] = None

class DeliveryFile(BaseModel):
    id: str
    url: str
    name: str
    size: int
    type: str
    uploadedAt: str

class ProductResponse(BaseModel):
    id: str
    title: str
    description: str = ""
    price: int = 0
    currency: str = "usd"
    slug: Optional[str] = None
    published: bool = False
    views: int = 0
    sales: int = 0
    files: List[DeliveryFile] = []
    has_custom_content: bool = False
    created_at: Optional[str] = None
    last_updated: Optional[str] = None

class PublicProduct(BaseModel):
    """Page produit publique /p/{seller}/{product} (sans les fichiers de livraison)"""
    id: str
    seller_id: int
    title: str
    description: str = ""
    price: int = 0
    currency: str = "usd"
    slug: Optional[str] = None
    has_custom_content: bool = False
