import logging
import re
from typing import Iterable, Sequence

from .errors import ConfigurationError
from .models import ResolvedTarget, ResourceDescriptor, ResourceSelector

logger = logging.getLogger(__name__)


def validate_selectors(selectors: Iterable[ResourceSelector]) -> None:
    """Checks every selector sets exactly one of `name` and `pattern`

    Args:
        selectors (Iterable[ResourceSelector]): selectors of a group

    Raises:
        ConfigurationError: a selector is malformed
    """
    for i, selector in enumerate(selectors):
        has_name = selector.name is not None
        has_pattern = selector.pattern is not None
        if has_name and has_pattern:
            raise ConfigurationError(f"selector #{i} sets both `name` and `pattern`")
        if not has_name and not has_pattern:
            raise ConfigurationError(f"selector #{i} sets neither `name` nor `pattern`")
        if has_pattern:
            try:
                re.compile(selector.pattern)  # type: ignore
            except re.error as e:
                raise ConfigurationError(f"selector #{i} has an invalid pattern `{selector.pattern}`: {e}") from e


def selects(selector: ResourceSelector, resource_name: str) -> bool:
    """Tests if a selector selects a resource name

    Args:
        selector (ResourceSelector): selector
        resource_name (str): resource name

    Returns:
        bool: True if selected
    """
    if selector.name is not None:
        return selector.name == resource_name
    # substring semantics, never anchored
    return re.search(selector.pattern, resource_name) is not None  # type: ignore


def candidate_names(selectors: Sequence[ResourceSelector], names: Iterable[str]) -> list[str]:
    """Filters listed names to the ones any selector selects

    Args:
        selectors (Sequence[ResourceSelector]): selectors
        names (Iterable[str]): listed resource names

    Returns:
        list[str]: names worth describing, in listed order
    """
    return [name for name in names if any(selects(s, name) for s in selectors)]


def match(selectors: Sequence[ResourceSelector], inventory: Sequence[ResourceDescriptor]) -> list[ResolvedTarget]:
    """Resolves selectors against discovered resources

    Args:
        selectors (Sequence[ResourceSelector]): validated selectors
        inventory (Sequence[ResourceDescriptor]): discovered resources

    Returns:
        list[ResolvedTarget]: one target per selector, in selector order
    """
    targets = []
    for selector in selectors:
        matched = tuple(res for res in inventory if selects(selector, res.name))
        if not matched:
            logger.info("no resource matches selector %s", selector.describe())
        targets.append(ResolvedTarget(selector=selector, resources=matched))

    return targets
