# =============================================================================
# Name Sorter
# =============================================================================

import locale
import time
from typing import Any
from uuid import uuid4

from loguru import logger

from .collector import TabRecord, collect_tabs, group_by_container
from .errors import Error, ErrorReport, ErrorType, UnsupportedContainerError
from .logging_config import trace_id_var
from .outcomes import OperationResult, Outcome
from .workspace import Leaf, Workspace, get_capability


def sort_key(name: str) -> str:
    """Case-insensitive, locale-aware collation key."""
    return locale.strxfrm(name.casefold())


def sort_records(records: list[TabRecord]) -> list[TabRecord]:
    """Stable sort; names equal after case folding keep their order."""
    return sorted(records, key=lambda record: sort_key(record.name))


def is_sorted(records: list[TabRecord]) -> bool:
    current = [record.name for record in records]
    return current == [record.name for record in sort_records(records)]


def _index_of(leaves: list[Leaf], leaf: Leaf) -> int:
    for index, candidate in enumerate(leaves):
        if candidate is leaf:
            return index
    raise ValueError("leaf is not a child of this container")


async def reorder_children(container: Any, leaves: list[Leaf]) -> None:
    """Make the container's children follow ``leaves``.

    Uses whole-list replacement when the host offers it, otherwise moves
    each out-of-place leaf into position. Leaves are never recreated.

    Raises:
        UnsupportedContainerError: container has neither capability
    """
    replace_children = get_capability(container, "async_replace_children")
    if replace_children is not None:
        await replace_children(list(leaves))
    else:
        move_child = get_capability(container, "async_move_child")
        if move_child is None:
            raise UnsupportedContainerError(
                f"{getattr(container, 'label', 'container')} cannot be reordered"
            )
        current = list(container.children)
        for index, leaf in enumerate(leaves):
            if index < len(current) and current[index] is leaf:
                continue
            await move_child(leaf, index)
            current.insert(index, current.pop(_index_of(current, leaf)))

    recompute = get_capability(container, "recompute_children_dimensions")
    if recompute is not None:
        recompute()


async def sort_tabs_by_name(workspace: Workspace) -> OperationResult:
    """Sort the tabs of every tab group alphabetically by display name."""
    start_time = time.perf_counter()
    op_trace_id = trace_id_var.get() or str(uuid4())
    report = ErrorReport()

    records = await collect_tabs(workspace)
    if not records:
        logger.info(
            "No tabs found to sort",
            operation="sort_tabs_by_name",
            status="empty",
            trace_id=op_trace_id
        )
        return OperationResult(Outcome.NOTHING_TO_SORT)

    # Reordering can shift focus, so remember it up front
    active_leaf = workspace.active_leaf

    total_sorted = 0
    failed_groups: list[str] = []

    for container, group in group_by_container(records):
        if len(group) <= 1:
            continue
        if is_sorted(group):
            continue

        label = getattr(container, "label", "a tab group")
        ordered = sort_records(group)
        try:
            await reorder_children(container, [record.leaf for record in ordered])
        except Exception as e:
            failed_groups.append(label)
            report.add_warning(Error(
                error_type=ErrorType.REORDER_FAILED,
                message=f"Error reordering tabs in {label}",
                context={"group": label, "error": str(e), "error_kind": type(e).__name__},
                original_exception=e
            ))
            continue

        total_sorted += len(group)
        logger.debug(
            "Tab group sorted",
            operation="sort_tabs_by_name",
            trace_id=op_trace_id,
            group=label,
            order=[record.name for record in ordered]
        )

    await workspace.async_request_save_layout()

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.info(
        "Tab sorting finished",
        operation="sort_tabs_by_name",
        status="success" if not failed_groups else "partial",
        trace_id=op_trace_id,
        metrics={
            "tabs": len(records),
            "sorted": total_sorted,
            "failed_groups": len(failed_groups),
            "duration_ms": duration_ms
        }
    )
    report.log_summary(op_trace_id, "sort_tabs_by_name")

    if total_sorted > 0:
        if active_leaf is not None:
            await workspace.async_set_active_leaf(active_leaf, focus=True)
        return OperationResult(Outcome.SORTED, count=total_sorted, failed_groups=failed_groups)
    if failed_groups:
        return OperationResult(Outcome.SORT_FAILED, failed_groups=failed_groups)
    return OperationResult(Outcome.ALREADY_SORTED)
