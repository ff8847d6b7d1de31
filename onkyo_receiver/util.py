# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Small helpers shared across the package
"""
from __future__ import annotations

from .internal_types import *

def full_class_name(o: object) -> str:
    """Returns "module.QualName" for the class of o; builtin classes are not qualified."""
    cls = type(o)
    if cls.__module__ == 'builtins':
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"

def clamp(value: int, low: int, high: int) -> int:
    """Return value limited to the closed range [low, high]."""
    return max(low, min(high, value))
