# =============================================================================
# User Notifications
# =============================================================================
# Transient macOS notifications via osascript. Nothing here blocks the
# iTerm2 event loop: osascript runs in the default executor.

import asyncio
import shutil
import subprocess

from loguru import logger

from .outcomes import OperationResult


def _applescript_string(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_notification_script(message: str, title: str, subtitle: str | None = None) -> str:
    """Build the AppleScript for a `display notification` call."""
    script = f"display notification {_applescript_string(message)} with title {_applescript_string(title)}"
    if subtitle:
        script += f" subtitle {_applescript_string(subtitle)}"
    return script


def send_notification(message: str, title: str, subtitle: str | None = None) -> bool:
    """
    Show a transient notification.

    Returns:
        True if osascript accepted the notification
    """
    osascript = shutil.which("osascript")
    if not osascript:
        logger.debug(
            "osascript not available, notification only logged",
            operation="send_notification",
            status="skipped",
            message_text=message
        )
        return False

    try:
        result = subprocess.run(
            [osascript, "-e", build_notification_script(message, title, subtitle)],
            capture_output=True,
            text=True,
            timeout=10,
            check=False
        )
    except (OSError, subprocess.TimeoutExpired, subprocess.SubprocessError) as e:
        logger.warning(
            "Could not show notification",
            operation="send_notification",
            status="failed",
            error=str(e),
            error_type=type(e).__name__
        )
        return False

    if result.returncode != 0:
        logger.warning(
            "osascript rejected notification",
            operation="send_notification",
            status="failed",
            return_code=result.returncode,
            stderr=result.stderr[:200]
        )
        return False
    return True


class Notifier:
    """Reports operation outcomes to the user."""

    def __init__(self, title: str = "Tab Organizer", enabled: bool = True):
        self.title = title
        self.enabled = enabled

    async def async_notify(self, message: str, subtitle: str | None = None) -> None:
        logger.info(
            message,
            operation="notify",
            status="info" if subtitle is None else subtitle.lower()
        )
        if not self.enabled:
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, send_notification, message, self.title, subtitle)

    async def async_report(self, result: OperationResult) -> None:
        """Show the outcome of one operation, then any per-group warnings."""
        await self.async_notify(result.message)
        for warning in result.warnings:
            await self.async_notify(warning, subtitle="Warning")
