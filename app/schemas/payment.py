from pydantic import BaseModel
from typing import Optional

# Stripe Connect + Checkout

class ConnectUrlRequest(BaseModel):
    return_url: str

class ConnectUrlResponse(BaseModel):
    url: str

class ConnectRequest(BaseModel):
    code: str

class ConnectResponse(BaseModel):
    success: bool
    account_id: str
    charges_enabled: bool
    payouts_enabled: bool

class CheckoutRequest(BaseModel):
    product_id: str
    seller_id: int
    origin: Optional[str] = None

class CheckoutResponse(BaseModel):
    url: str
