"""Debrief model: computed scenario metrics and the short feedback lines."""
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from app.db.session import Base


class Debrief(Base):
    __tablename__ = "debriefs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_hint = Column(String(64), nullable=True, index=True)
    scenario_id = Column(String(64), nullable=False, index=True)

    # all 0-100
    mission_score = Column(Integer, nullable=False)
    decision_quality = Column(Integer, nullable=False)
    confidence_alignment = Column(Integer, nullable=False)
    cri = Column(Integer, nullable=False)
    bias_awareness = Column(Integer, nullable=False)
    trust_calibration = Column(Integer, nullable=False)
    information_advantage = Column(Integer, nullable=False)
    cognitive_adaptability = Column(Integer, nullable=False)
    escalation_tendency = Column(Integer, nullable=False)
    reflection_quality = Column(Integer, nullable=False)

    # short_feedback: JSON of {line1, line2}
    short_feedback_json = Column(Text, nullable=False)
    computed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
