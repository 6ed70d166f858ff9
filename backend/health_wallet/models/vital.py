from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from health_wallet.database import Base


class Vital(Base):
    __tablename__ = "vitals"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(Integer, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    # Always the parent report's owner
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    vital_name = Column(String(50), nullable=False)
    vital_value = Column(Text, nullable=False)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    report = relationship("Report", back_populates="vitals")
