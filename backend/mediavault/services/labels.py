"""Label set comparison."""

from typing import Any, Callable, Hashable, Iterable, Optional


def labels_equal(
    old: Iterable[Any],
    new: Iterable[Any],
    old_key: Optional[Callable[[Any], Hashable]] = None,
    new_key: Optional[Callable[[Any], Hashable]] = None,
) -> bool:
    """Check whether two label collections hold the same identifiers.

    Order and duplicates are ignored. Key functions extract the identifier
    from each element, so a list of ``Label`` rows can be compared with a
    list of raw IDs.

    Args:
        old: Previous labels
        new: Incoming labels
        old_key: Identifier extractor for ``old`` elements
        new_key: Identifier extractor for ``new`` elements

    Returns:
        True if both collections contain the same identifiers
    """
    old_ids = {old_key(item) if old_key else item for item in old}
    new_ids = {new_key(item) if new_key else item for item in new}
    return old_ids == new_ids
