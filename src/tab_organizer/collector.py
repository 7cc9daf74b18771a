# =============================================================================
# Tab Collector
# =============================================================================

from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from .workspace import TABS_KIND, FileRef, Leaf, Workspace, get_capability

UNKNOWN_NAME = "Unknown"


@dataclass
class TabRecord:
    """One open tab as seen when an operation starts."""
    leaf: Leaf
    container: Any
    name: str
    file_path: Optional[str] = None

    @property
    def dedup_key(self) -> str:
        # Fileless views fall back to their display name
        return self.file_path or self.name


async def get_leaf_file(leaf: Leaf) -> FileRef | None:
    """Return the persisted file shown by the leaf's view, if any."""
    get_file = get_capability(leaf.view, "async_get_file")
    if get_file is None:
        return None
    file_ref = await get_file()
    if isinstance(file_ref, FileRef) and file_ref.path:
        return file_ref
    return None


async def get_leaf_display_name(leaf: Leaf, file_ref: FileRef | None = None) -> str:
    """Get the display name for a tab.

    Priority order:
    1. The view's own display text
    2. Basename of the backing file
    3. The view type identifier
    4. "Unknown"
    """
    view = leaf.view

    get_display_text = get_capability(view, "async_get_display_text")
    if get_display_text is not None:
        text = await get_display_text()
        if text:
            return text

    if file_ref is None:
        file_ref = await get_leaf_file(leaf)
    if file_ref is not None and file_ref.basename:
        return file_ref.basename

    get_view_type = get_capability(view, "async_get_view_type")
    if get_view_type is not None:
        view_type = await get_view_type()
        if view_type:
            return view_type

    return UNKNOWN_NAME


def is_tab_leaf(leaf: Leaf) -> bool:
    """True if the leaf sits in a tabbed container."""
    parent = leaf.parent
    return parent is not None and getattr(parent, "kind", None) == TABS_KIND


async def collect_tabs(workspace: Workspace) -> list[TabRecord]:
    """Snapshot every tab that lives in a tab group, in host order."""
    records: list[TabRecord] = []
    skipped = 0

    for leaf in workspace.iterate_all_leaves():
        if not is_tab_leaf(leaf):
            skipped += 1
            continue
        file_ref = await get_leaf_file(leaf)
        name = await get_leaf_display_name(leaf, file_ref)
        records.append(TabRecord(
            leaf=leaf,
            container=leaf.parent,
            name=name,
            file_path=file_ref.path if file_ref else None,
        ))

    logger.debug(
        "Tabs collected",
        operation="collect_tabs",
        status="success",
        metrics={"tabs": len(records), "skipped_leaves": skipped}
    )
    return records


def group_by_container(records: list[TabRecord]) -> list[tuple[Any, list[TabRecord]]]:
    """Group records by owning container, keeping first-seen order.

    Returns (container, records) pairs. Grouping is by identity, so host
    containers need not be hashable.
    """
    groups: dict[int, tuple[Any, list[TabRecord]]] = {}
    for record in records:
        entry = groups.setdefault(id(record.container), (record.container, []))
        entry[1].append(record)
    return list(groups.values())
