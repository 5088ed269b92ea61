"""Linked gaming platform accounts."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, JSON, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from reelshelf.database import Base

SUPPORTED_PLATFORMS = ("steam", "xbox", "playstation")


class PlatformConnection(Base):
    """A user's linked Steam, Xbox or PlayStation account and its synced library."""

    __tablename__ = "platform_connections"
    __table_args__ = (
        UniqueConstraint("user_id", "platform_type", name="uq_platform_connections_user_platform"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    platform_type = Column(String(20), nullable=False, index=True)  # 'steam', 'xbox', 'playstation'
    platform_user_id = Column(String(100), nullable=True)

    # Tokens are Fernet-encrypted (see CredentialService)
    encrypted_access_token = Column(Text, nullable=True)
    encrypted_refresh_token = Column(Text, nullable=True)
    expires_at = Column(DateTime, nullable=True)

    games_data = Column(JSON, nullable=False, default=list)
    last_synced_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="platform_connections")

    def __repr__(self):
        return f"<PlatformConnection(user_id={self.user_id}, platform={self.platform_type})>"
