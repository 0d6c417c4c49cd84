from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, Float
from sqlalchemy.sql import func, false
from sqlalchemy.orm import relationship
from app.core.database import Base


class Note(Base):
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(100), nullable=True)
    tags = Column(Text, nullable=True)  # comma separated
    priority = Column(String(20), nullable=False, server_default="Medium")
    is_favorite = Column(Boolean, nullable=False, server_default=false())
    audio_filename = Column(String(255), nullable=True)
    audio_duration = Column(Float, nullable=True)  # seconds
    audio_size = Column(Integer, nullable=True)  # bytes
    has_audio = Column(Boolean, nullable=False, server_default=false())
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="notes")
