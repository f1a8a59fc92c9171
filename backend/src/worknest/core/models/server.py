# Registered external server
import uuid

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel
from .types import GUID


class Server(BaseModel):
    """External server integration, name unique per owner."""

    __tablename__ = "servers"

    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_servers_user_name"),
        Index("idx_servers_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Server(name='{self.name}', url='{self.url}')>"
