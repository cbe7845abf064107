"""
All-Server Backend — User SQLAlchemy Model
============================================

What:  ORM model representing the `users_test` table.
Who:   Used by UserService for CRUD operations.

Columns:
    - id: Auto-increment integer primary key, assigned by the store
    - name / email: Free text, no format or uniqueness constraint
    - date: Display string "<year>年<month>月<day>日" written once at creation
    - created_at / updated_at: Server time at insert / last update
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from allserver.database import Base


class User(Base):
    """
    A row of the users collection.

    Lifecycle:
        1. Inserted by create (id assigned by the store)
        2. name/email/updated_at rewritten by update; date is never touched again
        3. Hard-deleted by delete
    """

    __tablename__ = "users_test"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    # Formatted string, not a DATE column
    date: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}', email='{self.email}')>"
