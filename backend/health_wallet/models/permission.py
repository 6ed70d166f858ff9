from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from health_wallet.database import Base

READ_ONLY = "read-only"


class Permission(Base):
    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("report_id", "grantee_identifier", name="uq_permissions_report_grantee"),
    )

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(Integer, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    grantee_identifier = Column(String(320), nullable=False, index=True)  # normalized email
    grantee_user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # NULL = pending invite
    access_level = Column(String(20), nullable=False, default=READ_ONLY)
    granted_at = Column(DateTime(timezone=True), server_default=func.now())

    report = relationship("Report", back_populates="permissions")

    @property
    def is_pending(self) -> bool:
        return self.grantee_user_id is None
