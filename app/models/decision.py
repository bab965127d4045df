"""Decision model: one authoritative locked decision at one decision point."""
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from app.db.session import Base


class Decision(Base):
    __tablename__ = "decisions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_hint = Column(String(64), nullable=True, index=True)
    scenario_id = Column(String(64), nullable=False, index=True)  # content code, e.g. HYB-01
    decision_point = Column(Integer, nullable=False)  # 1..3
    selected_option_id = Column(String(64), nullable=False)
    confidence = Column(Integer, nullable=False)  # 1..5
    time_on_page_ms = Column(Integer, nullable=False, default=0)
    # details: JSON of {selection_sequence, change_count, confidence_change_count, timestamps, is_final, step}
    details_json = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
