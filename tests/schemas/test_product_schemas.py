"""Product Schemas: verifies decoding of transient records and the empty default."""

from catalog.schemas.product import ProductCreate, ProductResponse


def test_create_ignores_client_supplied_id():
    body = ProductCreate.model_validate({"id": 7, "name": "Widget", "price": 9.99})
    product = body.to_model()
    assert product.id is None
    assert (product.name, product.price) == ("Widget", 9.99)


def test_create_parses_numeric_strings():
    assert ProductCreate.model_validate({"price": "9.99"}).price == 9.99


def test_empty_default_record_is_all_null():
    assert ProductResponse.empty().model_dump() == {"id": None, "name": None, "price": None}
