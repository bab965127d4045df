"""Branch resolution: which options a decision point shows given the prior choice."""
import logging

from app.schemas.scenario import DecisionPointSchema, FlatOptionsSchema, OptionSchema

logger = logging.getLogger(__name__)


def resolve_options(point: DecisionPointSchema, prior_option_id: str | None) -> tuple[OptionSchema, ...]:
    """Return the ordered options visible at a decision point.

    Keyed branches fall back to the `default` list and then to every branch
    concatenated in key order, so incomplete authoring shows everything rather
    than nothing. An empty result means the document defines no options here.
    """
    option_set = point.options
    if isinstance(option_set, FlatOptionsSchema):
        resolved = option_set.options
    else:
        branch = option_set.by_prior_id.get(prior_option_id) if prior_option_id is not None else None
        if branch:
            resolved = branch
        elif option_set.default:
            resolved = option_set.default
        else:
            resolved = tuple(opt for seq in option_set.by_prior_id.values() for opt in seq)

    if not resolved:
        logger.warning(
            "authoring error: decision point %s resolves to no options (prior=%r)",
            point.index,
            prior_option_id,
        )
    return resolved


def find_option(options: tuple[OptionSchema, ...], option_id: str | None) -> OptionSchema | None:
    for opt in options:
        if opt.id == option_id:
            return opt
    return None
