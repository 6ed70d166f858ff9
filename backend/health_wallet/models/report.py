from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from health_wallet.database import Base


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    file_url = Column(String(1000), nullable=False)
    original_filename = Column(String(500))
    report_type = Column(String(100), nullable=False, default="General")
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    vitals = relationship(
        "Vital",
        back_populates="report",
        order_by="Vital.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    permissions = relationship(
        "Permission",
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
