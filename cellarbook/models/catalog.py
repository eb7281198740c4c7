"""Wine catalog reference table, filled by the offline CSV import."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cellarbook.database import Base


class CatalogRow(Base):
    """Read-only reference data used to prefill new wines."""

    __tablename__ = "wine_catalog"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="Other")
    wine_type: Mapped[str | None] = mapped_column("wine", String(255), nullable=True)
    sub_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    producer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    region: Mapped[str | None] = mapped_column(String(255), nullable=True)
    country: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<CatalogRow(id={self.id}, name={self.name}, producer={self.producer})>"
