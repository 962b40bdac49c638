"""Products: list, get and create handlers.

Invariants:
    - Each handler runs exactly one unit of work through the gateway
    - The id segment is parsed before the gateway dependency resolves, so a
      malformed id is a 400 that never touches the store
    - A missing product is answered with the empty-default record and 200
    - POST answers 200 with the record carrying its assigned id
"""

import logging

from fastapi import APIRouter, Depends, status

from catalog.api.dependencies import get_gateway, product_id_path
from catalog.core.domain_types import ProductId
from catalog.infrastructure.database import PersistenceGateway
from catalog.models.product import Product
from catalog.schemas.product import ProductCreate, ProductResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[ProductResponse])
async def list_products(gateway: PersistenceGateway = Depends(get_gateway)):
    """Return every product."""
    products = await gateway.find_all(Product)
    return [ProductResponse.model_validate(p) for p in products]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: ProductId = Depends(product_id_path),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Return one product, or the empty-default record when it does not exist."""
    product = await gateway.find_by_id(Product, product_id)
    if product is None:
        logger.debug(f"Product {product_id} not found, returning empty record")
        return ProductResponse.empty()
    return ProductResponse.model_validate(product)


@router.post(
    "", response_model=ProductResponse, status_code=status.HTTP_200_OK,
)
async def create_product(
    body: ProductCreate, gateway: PersistenceGateway = Depends(get_gateway),
):
    """Persist a new product."""
    product = await gateway.persist(body.to_model())
    logger.info(f"Created product {product.id}")
    return ProductResponse.model_validate(product)
