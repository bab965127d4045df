"""Reflection model: free-text essay submitted before or after a scenario."""
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from app.db.session import Base


class Reflection(Base):
    __tablename__ = "reflections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_hint = Column(String(64), nullable=True, index=True)
    scenario_id = Column(String(64), nullable=False, index=True)
    phase = Column(String(8), nullable=False)  # pre | post
    text = Column(Text, nullable=False)
    word_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
