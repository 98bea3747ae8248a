# wastebin/models/paste.py

from sqlalchemy import Column, String, LargeBinary, DateTime, Boolean
from wastebin.models.base import Base

class Paste(Base):
    __tablename__ = "pastes"

    id = Column(String(64), primary_key=True)

    # ciphertext for protected/sealed pastes, raw bytes otherwise
    data = Column(LargeBinary, nullable=False)

    # empty for pastes without a password
    salt = Column(LargeBinary, nullable=False, default=b"")
    nonce = Column(LargeBinary, nullable=False, default=b"")

    extension = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    burn_after_read = Column(Boolean, nullable=False, default=False)
