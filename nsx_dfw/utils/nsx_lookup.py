"""
Helpers shared by the section and rule repositories.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from nsx_dfw.core.errors import DuplicateNameError, IntegrityError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DUPLICATE_POLICIES = ("error", "last")


def collect_results(client, path: str) -> Optional[List[Dict[str, Any]]]:
    """
    Fetch every page of an NSX list endpoint.

    NSX wraps list responses as {"results": [...], "cursor": "..."}; the
    cursor is absent on the last page.

    Returns:
        All results in store order, or None if the first page was not found

    Raises:
        IntegrityError: A later page disappeared while paging
    """
    results: List[Dict[str, Any]] = []
    params: Optional[Dict[str, Any]] = None
    while True:
        page = client.get(path, params=params)
        if page is None:
            if params is None:
                return None
            raise IntegrityError(f"Page at cursor {params['cursor']} of {path} not found")
        results.extend(page.get("results") or [])
        cursor = page.get("cursor")
        if not cursor:
            break
        params = {"cursor": cursor}
    return results


def pick_by_name(items: Sequence[T], name: str, policy: str, kind: str) -> Optional[T]:
    """
    Select the item whose display_name equals name.

    Args:
        items: Candidates in store order
        name: Exact display name
        policy: "error" raises on duplicates, "last" keeps the last match
        kind: Object kind for messages ("section", "rule")

    Returns:
        The matching item, or None
    """
    matches = [item for item in items if item.display_name == name]
    if not matches:
        return None
    if len(matches) > 1:
        ids = ", ".join(str(item.id) for item in matches)
        if policy == "error":
            raise DuplicateNameError(f"Found {len(matches)} {kind}s named '{name}': {ids}")
        logger.warning(f"Found {len(matches)} {kind}s named '{name}' ({ids}); using the last one")
    return matches[-1]
