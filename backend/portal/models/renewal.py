from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, Numeric, true
from portal.core.database import Base


class Renewal(Base):
    """A service/provider/domain subscription. Not linked to other tables."""

    __tablename__ = "renewals_data"

    id = Column(Integer, primary_key=True, index=True)
    service = Column(String, nullable=False)
    provider = Column(String, nullable=False)
    domain = Column(String, nullable=False)
    purchase_date = Column(Date, nullable=False)
    renewal_date = Column(Date, nullable=False)
    cost = Column(Numeric(12, 2), nullable=False, default=0)
    autorenew = Column(Boolean, nullable=False, default=False)
    daysuntilrenewal = Column(Integer)
    icon = Column(String)
    status = Column(String, nullable=False, default="Active")
    active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_date = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
