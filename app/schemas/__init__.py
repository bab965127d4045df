from app.schemas.debrief import (
    ComputeDebriefInSchema,
    ComputeDebriefOutSchema,
    DebriefSchema,
    MetricsSchema,
    ShortFeedbackSchema,
)
from app.schemas.run import RunOutSchema, StartRunSchema
from app.schemas.scenario import OptionSchema, ScenarioDocumentSchema

__all__ = [
    "ComputeDebriefInSchema",
    "ComputeDebriefOutSchema",
    "DebriefSchema",
    "MetricsSchema",
    "OptionSchema",
    "RunOutSchema",
    "ScenarioDocumentSchema",
    "ShortFeedbackSchema",
    "StartRunSchema",
]
