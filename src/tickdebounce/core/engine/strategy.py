from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Callable


def structural_equals(a: Any, b: Any) -> bool:
    """
    ``==`` with identity first, and NaN equal to NaN.

    Containers already short-circuit on identity for their items, so only a
    bare NaN (or two distinct NaN floats) needs the explicit check.
    """
    if a is b:
        return True
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    return bool(a == b)


@dataclass(frozen=True, slots=True)
class ChangeStrategy:
    """
    Equality / clone pair used for change detection.

    Defaults rely on Python's structural ``==`` (deep for dicts, lists, tuples,
    sets and dataclasses) and ``copy.deepcopy``. Hosts whose data does not
    compare structurally, or is expensive to copy, supply their own pair.
    """

    equals: Callable[[Any, Any], bool] = field(default=structural_equals)
    clone: Callable[[Any], Any] = field(default=copy.deepcopy)

    def same(self, a: Any, b: Any) -> bool:
        return bool(self.equals(a, b))
