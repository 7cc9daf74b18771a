# =============================================================================
# Entry Point
# =============================================================================

import locale
import sys
from uuid import uuid4

import iterm2
from loguru import logger

from .config_loader import load_config
from .dedup import remove_duplicate_tabs
from .iterm2_host import ItermWorkspace
from .logging_config import setup_logger, trace_id_var
from .notifier import Notifier
from .organize import organize_tabs
from .outcomes import OperationResult
from .sorter import sort_tabs_by_name

# Command name -> title shown in logs and docs
COMMANDS = {
    "sort": "Sort tabs by name",
    "dedup": "Remove duplicate tabs (keep one)",
    "organize": "Organize tabs (sort and remove duplicates)",
}

STATUS_BAR_IDENTIFIER = "com.github.iterm2-tab-organizer.organize"
STATUS_BAR_LABEL = "⇅ Organize tabs"


async def run_operation(workspace, command: str, settle_time: float) -> list[OperationResult]:
    """Run one organizer command against the workspace."""
    if command == "sort":
        return [await sort_tabs_by_name(workspace)]
    if command == "dedup":
        return [await remove_duplicate_tabs(workspace)]
    if command == "organize":
        return await organize_tabs(workspace, settle_time=settle_time)
    raise ValueError(f"Unknown command: {command}")


async def run_command(workspace, notifier: Notifier, command: str, settle_time: float) -> None:
    """
    Run a command and report its outcome.

    Never raises: a failing command is logged so the iTerm2 dispatcher
    keeps serving later invocations.
    """
    token = trace_id_var.set(str(uuid4()))
    try:
        logger.info(
            COMMANDS.get(command, command),
            operation="run_command",
            status="started",
            command=command
        )
        results = await run_operation(workspace, command, settle_time)
        for result in results:
            await notifier.async_report(result)
        logger.info(
            "Command finished",
            operation="run_command",
            status="success",
            command=command,
            outcomes=[result.outcome.value for result in results]
        )
    except Exception:
        logger.exception(
            "Command failed",
            operation="run_command",
            status="failed",
            command=command
        )
    finally:
        trace_id_var.reset(token)


async def register_commands(connection, workspace, notifier: Notifier, settle_time: float) -> None:
    """Register the commands as iTerm2 script functions and a status bar button.

    The functions can be bound to keys via "Invoke Script Function", e.g.
    ``tab_organizer_organize()``.
    """

    @iterm2.RPC
    async def tab_organizer_sort():
        await run_command(workspace, notifier, "sort", settle_time)

    @iterm2.RPC
    async def tab_organizer_remove_duplicates():
        await run_command(workspace, notifier, "dedup", settle_time)

    @iterm2.RPC
    async def tab_organizer_organize():
        await run_command(workspace, notifier, "organize", settle_time)

    await tab_organizer_sort.async_register(connection)
    await tab_organizer_remove_duplicates.async_register(connection)
    await tab_organizer_organize.async_register(connection)

    component = iterm2.StatusBarComponent(
        short_description="Organize Tabs",
        detailed_description="Remove duplicate tabs, then sort tabs by name",
        knobs=[],
        exemplar=STATUS_BAR_LABEL,
        update_cadence=None,
        identifier=STATUS_BAR_IDENTIFIER
    )

    @iterm2.StatusBarRPC
    async def tab_organizer_status(knobs):
        return STATUS_BAR_LABEL

    @iterm2.RPC
    async def tab_organizer_click(session_id):
        await run_command(workspace, notifier, "organize", settle_time)

    await component.async_register(connection, tab_organizer_status, onclick=tab_organizer_click)

    logger.info(
        "Commands registered",
        operation="register_commands",
        status="success",
        commands=sorted(COMMANDS)
    )


def setup_collation() -> None:
    """Use the user's locale for name comparison."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(
            "Could not set collation locale, using byte order",
            operation="setup_collation",
            status="fallback",
            error=str(e)
        )


def make_main(config: dict, command: str | None):
    """Build the coroutine handed to iterm2.run_*."""
    settle_time = config["organize"]["settle_time"]
    notifier = Notifier(
        title=config["notifications"]["title"],
        enabled=config["notifications"]["enabled"]
    )

    async def main(connection):
        workspace = await ItermWorkspace.async_create(
            connection,
            arrangement_name=config["layout"]["arrangement_name"]
        )
        if command is None:
            await register_commands(connection, workspace, notifier, settle_time)
        else:
            await run_command(workspace, notifier, command, settle_time)

    return main


def run(argv: list[str] | None = None) -> None:
    """
    Usage:
        python -m tab_organizer             # stay resident, register commands
        python -m tab_organizer organize    # run once: dedup then sort
        python -m tab_organizer sort
        python -m tab_organizer dedup
    """
    argv = sys.argv[1:] if argv is None else argv
    command = argv[0] if argv else None
    if command is not None and command not in COMMANDS:
        print(f"ERROR: unknown command {command!r}", file=sys.stderr)
        print(f"Commands: {', '.join(sorted(COMMANDS))}", file=sys.stderr)
        sys.exit(2)

    setup_logger()
    config = load_config()
    if config["logging"]["level"] != "INFO":
        setup_logger(config["logging"]["level"])
    setup_collation()

    main = make_main(config, command)
    if command is None:
        iterm2.run_forever(main)
    else:
        iterm2.run_until_complete(main)


if __name__ == "__main__":
    run()
