"""Dependencies: verifies request-scoped lookups stay on the event loop.

Tests:
    - Every dependency is a coroutine function, so FastAPI never offloads it to a thread
    - get_gateway reads the attached gateway, or raises ServiceNotReadyError
    - product_id_path parses the raw segment
"""

import inspect
from types import SimpleNamespace

import pytest

from catalog.api.dependencies import get_context, get_gateway, product_id_path
from catalog.context import AppContext
from catalog.core.errors import ClientInputError, ServiceNotReadyError


def _request(context: AppContext):
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(context=context)))


@pytest.mark.parametrize("dependency", [get_context, get_gateway, product_id_path])
def test_dependencies_are_coroutines(dependency):
    assert inspect.iscoroutinefunction(dependency)


async def test_get_gateway_returns_attached_gateway(settings):
    gateway = object()
    assert await get_gateway(_request(AppContext(settings, gateway))) is gateway


async def test_get_gateway_before_attach_is_not_ready(settings):
    with pytest.raises(ServiceNotReadyError):
        await get_gateway(_request(AppContext(settings)))


async def test_product_id_path_parses_segment():
    assert await product_id_path("-7") == -7
    with pytest.raises(ClientInputError):
        await product_id_path("seven")
