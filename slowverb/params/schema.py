"""
Parameter schema for the effect controls.
Ranges here are the validation bounds used by resolve_params and the setters.
"""
from typing import Dict, Any, Literal

from slowverb.params.canonical_defaults import ENGINE_DEFAULTS

# Type definitions
ParamType = Literal["float", "int", "bool"]
ParamGroup = Literal["transport", "reverb"]

# Schema entry structure: type, default, min, max, step, group, description
ParamSchemaEntry = Dict[str, Any]


def _make_param(
    param_type: ParamType,
    default: Any,
    min_val: float,
    max_val: float,
    step: float,
    group: ParamGroup,
    description: str,
) -> ParamSchemaEntry:
    """Helper to create a schema entry."""
    return {
        "type": param_type,
        "default": default,
        "min": min_val,
        "max": max_val,
        "step": step,
        "group": group,
        "description": description,
    }


PARAM_SCHEMA: Dict[str, ParamSchemaEntry] = {
    "speed": _make_param(
        "float", ENGINE_DEFAULTS["speed"], 0.5, 1.5, 0.01, "transport",
        "Playback rate; changes tempo and pitch together (1.0 = unmodified)",
    ),
    "wetness": _make_param(
        "float", ENGINE_DEFAULTS["wetness"], 0.0, 1.0, 0.01, "reverb",
        "Reverb mix (0 = dry, 1 = wet); also sets the reverb tail length",
    ),
}

DEFAULT_PARAMS: Dict[str, float] = {name: entry["default"] for name, entry in PARAM_SCHEMA.items()}
