from app.models.certificate import Certificate
from app.models.debrief import Debrief
from app.models.decision import Decision
from app.models.reflection import Reflection

__all__ = ["Decision", "Reflection", "Debrief", "Certificate"]
