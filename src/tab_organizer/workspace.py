# =============================================================================
# Host Workspace Interface
# =============================================================================
# The organizer never owns the tab tree. It reads and mutates it through
# these protocols; iterm2_host.py binds them to iTerm2 and the tests bind
# them to an in-memory tree.
#
# Optional capabilities are looked up with get_capability() rather than
# declared here, since a host may implement any subset of them:
#   View.async_get_display_text() -> str | None
#   View.async_get_file() -> FileRef | None
#   View.async_get_view_type() -> str | None
#   Container.async_replace_children(leaves)
#   Container.async_move_child(leaf, index)
#   Container.recompute_children_dimensions()
#   Workspace.async_settle(leaves) -> list of leaves still open

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Protocol

TABS_KIND = "tabs"


@dataclass(frozen=True)
class FileRef:
    """A persisted file (or directory) a view is showing."""
    path: str
    basename: str


class Container(Protocol):
    kind: str
    label: str

    @property
    def children(self) -> list["Leaf"]: ...


class Leaf(Protocol):
    @property
    def parent(self) -> Optional[Container]: ...

    @property
    def view(self) -> Any: ...

    async def async_detach(self) -> None: ...


class Workspace(Protocol):
    def iterate_all_leaves(self) -> Iterator[Leaf]: ...

    @property
    def active_leaf(self) -> Optional[Leaf]: ...

    async def async_set_active_leaf(self, leaf: Leaf, focus: bool = True) -> None: ...

    async def async_request_save_layout(self) -> None: ...


def get_capability(obj: Any, name: str) -> Callable | None:
    """Return obj.name if it is callable, else None."""
    if obj is None:
        return None
    attr = getattr(obj, name, None)
    return attr if callable(attr) else None
