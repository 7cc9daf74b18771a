# =============================================================================
# iTerm2 Workspace Binding
# =============================================================================
# Maps the organizer's host interface onto the iTerm2 Python API:
#   workspace -> iterm2.App, container -> Window, leaf -> Tab.
# Buried sessions are enumerated as leaves without a container.

import asyncio
import os
import time

import iterm2
from loguru import logger

from .errors import HostError
from .workspace import TABS_KIND, FileRef

SETTLE_POLL_INTERVAL = 0.01
# Long enough for the user to answer iTerm2's confirm-on-close prompt
DEFAULT_SETTLE_LIMIT = 5.0


class ItermView:
    """The content of a tab: its title and its current session."""

    def __init__(self, session, tab=None):
        self.session = session
        self.tab = tab

    async def _async_get_variable(self, obj, name: str):
        try:
            return await obj.async_get_variable(name)
        except (iterm2.RPCException, AttributeError, TypeError):
            logger.debug(
                "Could not query variable",
                operation="get_variable",
                variable=name,
                session_id=getattr(self.session, "session_id", "unknown"),
            )
            return None

    async def async_get_display_text(self) -> str | None:
        if self.tab is not None:
            title = await self._async_get_variable(self.tab, "title")
            if title:
                return title
        if self.session is not None:
            return getattr(self.session, "name", None)
        return None

    async def async_get_file(self) -> FileRef | None:
        if self.session is None:
            return None
        path = await self._async_get_variable(self.session, "path")
        if not path:
            return None
        normalized = os.path.realpath(path).rstrip("/") or "/"
        return FileRef(path=normalized, basename=os.path.basename(normalized) or normalized)

    async def async_get_view_type(self) -> str | None:
        if self.session is None:
            return None
        return await self._async_get_variable(self.session, "jobName")


class ItermContainer:
    """A terminal window; its tabs are the container's children."""

    kind = TABS_KIND

    def __init__(self, window, workspace: "ItermWorkspace"):
        self.window = window
        self.workspace = workspace
        self.label = f"window {window.window_id}"

    @property
    def children(self) -> list["ItermLeaf"]:
        return [self.workspace.leaf_for_tab(tab, self) for tab in self.window.tabs]

    async def async_replace_children(self, leaves: list["ItermLeaf"]) -> None:
        tabs = [leaf.tab for leaf in leaves]
        try:
            await self.window.async_set_tabs(tabs)
        except iterm2.RPCException as e:
            raise HostError(f"Could not reorder tabs in {self.label}: {e}") from e


class ItermLeaf:
    def __init__(self, parent: ItermContainer | None, tab=None, session=None):
        self.parent = parent
        self.tab = tab
        self.session = session if session is not None else tab.current_session
        self.view = ItermView(self.session, tab)

    @property
    def tab_id(self) -> str | None:
        return self.tab.tab_id if self.tab is not None else None

    async def async_detach(self) -> None:
        try:
            if self.tab is not None:
                await self.tab.async_close(force=False)
            else:
                await self.session.async_close(force=False)
        except iterm2.RPCException as e:
            raise HostError(f"Could not close tab: {e}") from e


class ItermWorkspace:
    """Host workspace backed by a live iterm2.App."""

    def __init__(
        self,
        connection,
        app,
        arrangement_name: str = "",
        settle_limit: float = DEFAULT_SETTLE_LIMIT,
    ):
        self.connection = connection
        self.app = app
        self.arrangement_name = arrangement_name
        self.settle_limit = settle_limit
        self._containers: dict[str, ItermContainer] = {}

    @classmethod
    async def async_create(cls, connection, **kwargs) -> "ItermWorkspace":
        app = await iterm2.async_get_app(connection)
        return cls(connection, app, **kwargs)

    def container_for_window(self, window) -> ItermContainer:
        container = self._containers.get(window.window_id)
        if container is None or container.window is not window:
            container = ItermContainer(window, self)
            self._containers[window.window_id] = container
        return container

    def leaf_for_tab(self, tab, container: ItermContainer) -> ItermLeaf:
        return ItermLeaf(container, tab=tab)

    def iterate_all_leaves(self):
        for window in self.app.terminal_windows:
            container = self.container_for_window(window)
            for tab in window.tabs:
                yield self.leaf_for_tab(tab, container)
        for session in getattr(self.app, "buried_sessions", None) or []:
            yield ItermLeaf(None, session=session)

    @property
    def active_leaf(self) -> ItermLeaf | None:
        window = self.app.current_terminal_window
        if window is None or window.current_tab is None:
            return None
        return self.leaf_for_tab(window.current_tab, self.container_for_window(window))

    async def async_set_active_leaf(self, leaf: ItermLeaf, focus: bool = True) -> None:
        try:
            if leaf.tab is not None:
                await leaf.tab.async_activate(order_window_front=focus)
            else:
                await leaf.session.async_activate(select_tab=True, order_window_front=focus)
        except iterm2.RPCException as e:
            logger.warning(
                "Could not restore active tab",
                operation="set_active_leaf",
                tab_id=leaf.tab_id,
                error=str(e),
            )

    async def async_request_save_layout(self) -> None:
        """Save all windows as a named iTerm2 arrangement."""
        if not self.arrangement_name:
            return
        try:
            await iterm2.Arrangement.async_save(self.connection, self.arrangement_name)
        except (iterm2.RPCException, iterm2.SavedArrangementException) as e:
            logger.warning(
                "Could not save window arrangement",
                operation="request_save_layout",
                arrangement=self.arrangement_name,
                error=str(e),
            )
            return
        logger.debug(
            "Window arrangement saved",
            operation="request_save_layout",
            arrangement=self.arrangement_name,
        )

    def is_open(self, leaf: ItermLeaf) -> bool:
        """True while the leaf is still listed in the app's layout model."""
        if leaf.tab is not None:
            return any(
                tab.tab_id == leaf.tab.tab_id
                for window in self.app.terminal_windows
                for tab in window.tabs
            )
        return any(
            session.session_id == leaf.session.session_id
            for session in getattr(self.app, "buried_sessions", None) or []
        )

    async def async_settle(self, leaves: list[ItermLeaf]) -> list[ItermLeaf]:
        """Wait until the given closed leaves have left the app's layout model.

        iTerm2 pushes layout changes to the App asynchronously, and a
        non-forced close may wait on the user's confirmation. Gives up
        after ``settle_limit`` seconds.

        Returns:
            The leaves that are still open (close declined or not yet done)
        """
        deadline = time.monotonic() + self.settle_limit
        still_open = [leaf for leaf in leaves if self.is_open(leaf)]
        while still_open and time.monotonic() < deadline:
            await asyncio.sleep(SETTLE_POLL_INTERVAL)
            still_open = [leaf for leaf in still_open if self.is_open(leaf)]

        if still_open:
            logger.warning(
                "Closed tabs still present after settle limit",
                operation="settle",
                status="timeout",
                pending=[leaf.tab_id or leaf.session.session_id for leaf in still_open],
            )
        return still_open
