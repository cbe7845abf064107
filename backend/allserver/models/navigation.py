"""
All-Server Backend — Navigation Site SQLAlchemy Model
=======================================================

What:  ORM model representing the `navigation_sites` table.
Who:   Used by NavigationService for CRUD operations.

The logo column holds a public path produced by the SVG upload endpoint,
e.g. /uploads/svg/1736150400000-github.svg. The path convention is enforced
by the service layer, not by the table.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from allserver.database import Base


class NavigationSite(Base):
    """A link card on the navigation page: logo, target url, name, description."""

    __tablename__ = "navigation_sites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    logo: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<NavigationSite(id={self.id}, name='{self.name}', url='{self.url}')>"
