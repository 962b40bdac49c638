"""Product Schemas: Pydantic models for the /products API boundary.

Invariants:
    - ProductCreate never carries an id (an id in the body is ignored)
    - ProductResponse with every field None is the empty-default record
    - Only type parsing happens here; constraints belong to the store
"""

from pydantic import BaseModel, ConfigDict

from catalog.models.product import Product


class ProductCreate(BaseModel):
    """Transient product decoded from a POST body."""
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    price: float | None = None

    def to_model(self) -> Product:
        return Product(name=self.name, price=self.price)


class ProductResponse(BaseModel):
    """Product as returned to clients."""
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    name: str | None = None
    price: float | None = None

    @classmethod
    def empty(cls) -> "ProductResponse":
        return cls()
