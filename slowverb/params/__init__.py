"""
Effect parameter schema, defaults and resolution.
Default values: single source is canonical_defaults.ENGINE_DEFAULTS; use resolve_params({}) for resolved defaults.
"""
from slowverb.params.schema import PARAM_SCHEMA
from slowverb.params.resolve import resolve_params, validate_param
from slowverb.params.canonical_defaults import ENGINE_DEFAULTS

__all__ = ["PARAM_SCHEMA", "resolve_params", "validate_param", "ENGINE_DEFAULTS"]
