"""Product ORM: the single managed entity.

Invariants:
    - id is assigned by the store on insert and never changes afterwards
    - A Product without id is transient; with id it is persisted and committed
    - name is unique; price is required

Design Decisions:
    - BigInteger id with an Integer variant on SQLite so ROWID autoincrement applies
    - Numeric(12, 2) stored, float returned (asdecimal=False) so JSON carries 9.99, not "9.99"
"""

from sqlalchemy import BigInteger, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog.db.base import Base


class Product(Base):
    """A catalog product."""
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True, autoincrement=True,
    )
    name: Mapped[str | None] = mapped_column(String(255), unique=True)
    price: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=False,
    )

    def __repr__(self) -> str:
        return f"Product(id={self.id!r}, name={self.name!r}, price={self.price!r})"
