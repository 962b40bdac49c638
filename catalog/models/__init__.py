"""ORM Models: imported here so Base.metadata is populated before create_all runs."""

from catalog.models.product import Product  # noqa: F401
