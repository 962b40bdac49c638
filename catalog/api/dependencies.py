"""FastAPI dependencies: the only path from a request to the process-scoped context."""

from fastapi import Request

from catalog.context import AppContext
from catalog.core.domain_types import ProductId, parse_product_id
from catalog.infrastructure.database import PersistenceGateway


async def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def get_gateway(request: Request) -> PersistenceGateway:
    """Raises ServiceNotReadyError until the orchestrator attaches the gateway."""
    return (await get_context(request)).gateway


async def product_id_path(product_id: str) -> ProductId:
    """Parse the :id segment before any persistence dependency resolves."""
    return parse_product_id(product_id)
