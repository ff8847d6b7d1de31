# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints used internally by this package"""

from typing import (
    Dict,
    List,
    Optional,
    Union,
    Any,
    TypeVar,
    Tuple,
    NamedTuple,
    Callable,
    Awaitable,
    Coroutine,
    Type,
    Iterable,
    Iterator,
    AsyncIterator,
    Sequence,
    Mapping,
    AsyncContextManager,
    TYPE_CHECKING,
    cast,
  )

from types import TracebackType

Jsonable = Union[str, int, float, bool, None, Dict[str, 'Jsonable'], List['Jsonable']]
"""A type hint for a JSON-serializable value"""

JsonableDict = Dict[str, Jsonable]
"""A type hint for a JSON-serializable dict"""
