"""Shared constants for comprehend.

Names used by generated code. Every internal identifier starts with
RESERVED_PREFIX; the parser rejects binding patterns and parameters that
use it, so generated names can never collide with user names.
"""

from __future__ import annotations

RESERVED_PREFIX = "_cq_"

# Entry points defined by generated modules
EAGER_ENTRY = f"{RESERVED_PREFIX}eager"
LAZY_ENTRY = f"{RESERVED_PREFIX}lazy"

# Eager output container and its cached insertion method
OUT_VAR = f"{RESERVED_PREFIX}out"
APPEND_VAR = f"{RESERVED_PREFIX}append"

# Lazy stage chain locals and runtime helpers
STAGE_VAR = f"{RESERVED_PREFIX}stage"
FRAME_ARG = f"{RESERVED_PREFIX}frame"
ELEM_ARG = f"{RESERVED_PREFIX}elem"
MAP_FUNC = f"{RESERVED_PREFIX}map"
FILTER_FUNC = f"{RESERVED_PREFIX}filter"
FLATTEN_FUNC = f"{RESERVED_PREFIX}flatten"
PARTIAL_FUNC = f"{RESERVED_PREFIX}partial"

# Bound in generated stage functions while re-raising a user StopIteration
STOP_VAR = f"{RESERVED_PREFIX}stop"
