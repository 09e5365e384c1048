"""
Parameter resolution: merge defaults with incoming params, then validate.
Out-of-range values are rejected, never clamped.
"""
import math
from typing import Dict, Any, Optional

from slowverb.core.errors import ParameterError
from slowverb.core.types import EffectParameters
from slowverb.params.schema import DEFAULT_PARAMS, PARAM_SCHEMA


def validate_param(name: str, value: Any) -> float:
    """Coerce value to float and check it against PARAM_SCHEMA bounds."""
    entry = PARAM_SCHEMA.get(name)
    if entry is None:
        raise ParameterError(f"Unknown parameter: {name}")
    if isinstance(value, bool):
        raise ParameterError(f"{name} must be a number, got {value!r}")
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ParameterError(f"{name} must be a number, got {value!r}") from None
    if math.isnan(v) or v < entry["min"] or v > entry["max"]:
        raise ParameterError(f"{name}={v} outside [{entry['min']}, {entry['max']}]")
    return v


def resolve_params(params: Optional[Dict[str, Any]] = None, base: Optional[EffectParameters] = None) -> EffectParameters:
    """
    Resolve params by:
    1. Starting from base (or DEFAULT_PARAMS)
    2. Merging incoming params onto it (incoming wins)
    3. Validating every value against PARAM_SCHEMA

    Returns:
        A new EffectParameters (inputs are not mutated).
    """
    if base is None:
        merged = dict(DEFAULT_PARAMS)
    else:
        merged = {"speed": base.speed, "wetness": base.wetness}

    for key, value in (params or {}).items():
        merged[key] = validate_param(key, value)

    return EffectParameters(
        speed=validate_param("speed", merged["speed"]),
        wetness=validate_param("wetness", merged["wetness"]),
    )
