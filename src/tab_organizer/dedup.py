# =============================================================================
# Duplicate Remover
# =============================================================================

import time
from uuid import uuid4

from loguru import logger

from .collector import TabRecord, collect_tabs
from .errors import Error, ErrorReport, ErrorType, HostError
from .logging_config import trace_id_var
from .outcomes import OperationResult, Outcome
from .workspace import Workspace, get_capability


def find_duplicates(records: list[TabRecord]) -> list[TabRecord]:
    """Return every record whose dedup key was already seen earlier.

    The first record per key (in enumeration order) is the one kept.
    """
    seen: set[str] = set()
    duplicates: list[TabRecord] = []
    for record in records:
        key = record.dedup_key
        if key in seen:
            duplicates.append(record)
        else:
            seen.add(key)
    return duplicates


async def remove_duplicate_tabs(workspace: Workspace) -> OperationResult:
    """Close every tab that repeats an earlier tab's file (or name)."""
    start_time = time.perf_counter()
    op_trace_id = trace_id_var.get() or str(uuid4())
    report = ErrorReport()

    records = await collect_tabs(workspace)
    if not records:
        logger.info(
            "No tabs found to process",
            operation="remove_duplicate_tabs",
            status="empty",
            trace_id=op_trace_id
        )
        return OperationResult(Outcome.NOTHING_TO_PROCESS)

    duplicates = find_duplicates(records)

    requested: list[TabRecord] = []
    for record in duplicates:
        try:
            await record.leaf.async_detach()
        except HostError as e:
            report.add_warning(Error(
                error_type=ErrorType.HOST_ERROR,
                message=f"Could not close duplicate tab: {record.name}",
                context={"tab_name": record.name, "dedup_key": record.dedup_key, "error": str(e)},
                original_exception=e
            ))
            continue
        requested.append(record)

    closed = requested
    settle = get_capability(workspace, "async_settle")
    if settle is not None and requested:
        # Only tabs that actually left the host count as removed
        still_open = {id(leaf) for leaf in await settle([record.leaf for record in requested])}
        closed = [record for record in requested if id(record.leaf) not in still_open]
        for record in requested:
            if id(record.leaf) in still_open:
                report.add_warning(Error(
                    error_type=ErrorType.HOST_ERROR,
                    message=f"Duplicate tab was kept open: {record.name}",
                    context={"tab_name": record.name, "dedup_key": record.dedup_key}
                ))

    for record in closed:
        logger.debug(
            "Closed duplicate tab",
            operation="remove_duplicate_tabs",
            trace_id=op_trace_id,
            tab_name=record.name,
            dedup_key=record.dedup_key
        )
    removed = len(closed)

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.info(
        "Duplicate removal finished",
        operation="remove_duplicate_tabs",
        status="success",
        trace_id=op_trace_id,
        metrics={
            "tabs": len(records),
            "duplicates": len(duplicates),
            "removed": removed,
            "duration_ms": duration_ms
        }
    )
    report.log_summary(op_trace_id, "remove_duplicate_tabs")

    if removed > 0:
        return OperationResult(Outcome.DUPLICATES_REMOVED, count=removed)
    return OperationResult(Outcome.NO_DUPLICATES)
