"""SQLAlchemy declarative base and model imports for Alembic."""
from app.db.session import Base

# Import all models so Alembic can see them
from app.models.certificate import Certificate  # noqa: F401
from app.models.debrief import Debrief  # noqa: F401
from app.models.decision import Decision  # noqa: F401
from app.models.reflection import Reflection  # noqa: F401

__all__ = ["Base", "Decision", "Reflection", "Debrief", "Certificate"]
