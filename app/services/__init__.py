from app.services.branching import resolve_options
from app.services.debrief import assemble_debrief
from app.services.scoring import compute_debrief
from app.services.tracker import DecisionTracker

__all__ = ["resolve_options", "assemble_debrief", "compute_debrief", "DecisionTracker"]
