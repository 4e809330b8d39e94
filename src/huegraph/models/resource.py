from typing import Optional

from pydantic import BaseModel, ConfigDict


class ResourceRef(BaseModel):
    rid: str
    rtype: str


class Metadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    archetype: Optional[str] = None  # z.B. "sultan_bulb"


class ProductData(BaseModel):
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    model_id: Optional[str] = None
    manufacturer_name: Optional[str] = None
    product_name: Optional[str] = None
    product_archetype: Optional[str] = None


class ResourceFrame(BaseModel):
    """The fields every v2 resource shares; the rest stays in the raw payload."""
    model_config = ConfigDict(extra="ignore")

    id: str
    type: str
    id_v1: Optional[str] = None
    owner: Optional[ResourceRef] = None
    # None = leaf; a list (auch leer) = composite resource
    services: Optional[list[ResourceRef]] = None
    children: list[ResourceRef] = []
    metadata: Metadata = Metadata()
    product_data: ProductData = ProductData()
