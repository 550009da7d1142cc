"""Key-set intersection for refinement chains."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

Keys = Sequence[str]


def intersect(results: Optional[Keys], search_keys: Iterable[str]) -> List[str]:
    """Keep the keys of ``results`` that also appear in ``search_keys``.

    ``results`` of ``None`` means no stage has run yet, so ``search_keys`` is
    returned as the running set. The order of ``results`` is preserved.
    """

    if results is None:
        return list(search_keys)
    allowed = set(search_keys)
    return [key for key in results if key in allowed]


__all__ = ["Keys", "intersect"]
