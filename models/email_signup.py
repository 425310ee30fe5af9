"""
Email signup model for the pre-launch waitlist
"""
import uuid
from sqlalchemy import Column, String, DateTime, JSON, Uuid, CheckConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from core.database import Base
from utils.validation import SIGNUP_SOURCES


class EmailSignup(Base):
    __tablename__ = "email_signups"
    __table_args__ = (
        CheckConstraint(
            "source IN (" + ", ".join(f"'{s}'" for s in SIGNUP_SOURCES) + ")",
            name="ck_email_signups_source",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    source = Column(String(32), nullable=False)
    user_agent = Column(String(512), nullable=True)

    # "metadata" is reserved on declarative classes
    signup_metadata = Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id) if self.id else None,
            "email": self.email,
            "source": self.source,
            "user_agent": self.user_agent,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "metadata": self.signup_metadata or {},
        }
