# =============================================================================
# Organize (remove duplicates, then sort)
# =============================================================================

import asyncio

from loguru import logger

from .dedup import remove_duplicate_tabs
from .outcomes import OperationResult, Outcome
from .sorter import sort_tabs_by_name
from .workspace import Workspace, get_capability

DEFAULT_SETTLE_TIME = 0.05


async def wait_for_settle(workspace: Workspace, settle_time: float) -> None:
    """Give the host time to finish processing closed tabs.

    Hosts with an ``async_settle`` hook were already awaited by the
    duplicate remover, so only hosts without one wait here. The fixed
    delay is a best guess, not a guarantee that the host has finished
    relaying out.
    """
    if get_capability(workspace, "async_settle") is not None:
        return
    logger.debug(
        "Host has no settle hook, using fixed delay",
        operation="wait_for_settle",
        status="fallback",
        settle_time=settle_time
    )
    await asyncio.sleep(settle_time)


async def organize_tabs(
    workspace: Workspace,
    settle_time: float = DEFAULT_SETTLE_TIME,
) -> list[OperationResult]:
    """Remove duplicate tabs, then sort what is left."""
    dedup_result = await remove_duplicate_tabs(workspace)

    if dedup_result.outcome == Outcome.DUPLICATES_REMOVED:
        await wait_for_settle(workspace, settle_time)

    sort_result = await sort_tabs_by_name(workspace)
    return [dedup_result, sort_result]
