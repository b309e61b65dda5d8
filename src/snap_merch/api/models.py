"""Pydantic request bodies for the vendor API."""

from pydantic import BaseModel, Field

from snap_merch.domain.sessions import ShippingAddress
from snap_merch.domain.vehicles import VehicleExtract


class CaptureRequest(BaseModel):
    """Photo of a vehicle, as a data URL or bare base64 JPEG."""

    image_base64: str = Field(min_length=1)


class IdentityRequest(VehicleExtract):
    """Vendor-edited vehicle identity."""


class GenerateSelectedRequest(BaseModel):
    style_ids: list[str] = Field(min_length=1)


class MockupRequest(BaseModel):
    style_id: str
    product_id: str
    color: str | None = None


class TweakRequest(BaseModel):
    instruction: str = Field(min_length=1, max_length=500)


class OrderItemRequest(BaseModel):
    product_id: str
    style_id: str
    size: str | None = None
    color: str | None = None


class ShippingAddressRequest(BaseModel):
    first_name: str
    last_name: str
    address1: str
    address2: str = ""
    city: str
    state: str
    zip: str
    country: str

    def to_domain(self) -> ShippingAddress:
        return ShippingAddress(**self.model_dump())


class OrderRequest(BaseModel):
    """Checkout payload for one car."""

    items: list[OrderItemRequest] = Field(min_length=1)
    customer_email: str = Field(min_length=3)
    customer_name: str | None = None
    customer_phone: str | None = None
    shipping_address: ShippingAddressRequest | None = None
    payment_id: str | None = None
