"""
Built-in exclusion policies and the filter registry.

COMMON_FILTERS is the default filter set: build-output blacklist, OS noise,
then ignore rules.
"""

from typing import Dict, Iterable, List

from .base import Filter, FilterFactory, FilterPipeline
from .builtin import DistFilter, MiscFilter, dist_filter, misc_filter
from .git_filter import GitIgnoreFilter, git_filter

COMMON_FILTERS: List[FilterFactory] = [dist_filter, misc_filter, git_filter]

FILTER_REGISTRY: Dict[str, FilterFactory] = {
    "dist": dist_filter,
    "misc": misc_filter,
    "git": git_filter,
}


def resolve_filters(names: Iterable[str]) -> List[FilterFactory]:
    """Map filter names to factories. Raises ValueError on an unknown name."""
    factories = []
    for name in names:
        try:
            factories.append(FILTER_REGISTRY[name])
        except KeyError:
            known = ", ".join(sorted(FILTER_REGISTRY))
            raise ValueError(f"Unknown filter '{name}' (known: {known})") from None
    return factories


__all__ = [
    "COMMON_FILTERS",
    "FILTER_REGISTRY",
    "DistFilter",
    "Filter",
    "FilterFactory",
    "FilterPipeline",
    "GitIgnoreFilter",
    "MiscFilter",
    "dist_filter",
    "git_filter",
    "misc_filter",
    "resolve_filters",
]
