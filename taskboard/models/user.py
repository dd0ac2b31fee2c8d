import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.models.base import Base
from taskboard.models.enums import AuthProvider, Role

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # kept as plain text so an unrecognised value degrades to viewer instead of failing the load
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=Role.developer.value)
    department: Mapped[str] = mapped_column(String(120), nullable=False, default="Engineering")
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)

    provider: Mapped[str] = mapped_column(String(16), nullable=False, default=AuthProvider.email.value)
    google_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
