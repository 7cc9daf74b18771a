"""
Shared pytest fixtures: an in-memory workspace that implements the host
interface the organizer talks to.
"""
import os

import pytest

from tab_organizer.workspace import TABS_KIND, FileRef


class FakeView:
    def __init__(self, display_text=None, path=None, view_type=None):
        self.display_text = display_text
        self.path = path
        self.view_type = view_type

    async def async_get_display_text(self):
        return self.display_text

    async def async_get_file(self):
        if self.path is None:
            return None
        return FileRef(path=self.path, basename=os.path.basename(self.path))

    async def async_get_view_type(self):
        return self.view_type


class BareView:
    """A view with no optional capabilities at all."""


class FakeLeaf:
    def __init__(self, view, parent=None, workspace=None):
        self.view = view
        self.parent = parent
        self.workspace = workspace
        self.detached = False

    async def async_detach(self):
        self.detached = True
        if self.parent is not None:
            self.parent.children.remove(self)
        elif self.workspace is not None:
            self.workspace.floating.remove(self)

    def __repr__(self):
        name = getattr(self.view, "display_text", None) or getattr(self.view, "path", None)
        return f"FakeLeaf({name!r})"


class FakeContainer:
    """Tab group supporting whole-list replacement."""

    def __init__(self, label, kind=TABS_KIND):
        self.label = label
        self.kind = kind
        self.children = []
        self.replace_calls = 0
        self.recompute_calls = 0

    async def async_replace_children(self, leaves):
        self.replace_calls += 1
        self.children.clear()
        self.children.extend(leaves)

    def recompute_children_dimensions(self):
        self.recompute_calls += 1

    # Unhashable, like many host objects
    __hash__ = None


class MoveOnlyContainer:
    """Tab group that only supports moving one child at a time."""

    def __init__(self, label, kind=TABS_KIND):
        self.label = label
        self.kind = kind
        self.children = []
        self.moves = []

    async def async_move_child(self, leaf, index):
        self.moves.append((leaf, index))
        self.children.remove(leaf)
        self.children.insert(index, leaf)


class FrozenContainer:
    """Tab group with no reorder capability."""

    def __init__(self, label, kind=TABS_KIND):
        self.label = label
        self.kind = kind
        self.children = []


class BrokenContainer(FakeContainer):
    async def async_replace_children(self, leaves):
        raise RuntimeError("unexpected container shape")


class FakeWorkspace:
    def __init__(self):
        self.containers = []
        self.floating = []
        self.active_leaf = None
        self.focus_requests = []
        self.save_requests = 0

    def add_container(self, container):
        self.containers.append(container)
        return container

    def add_tab(self, container, name=None, path=None, view_type=None, view=None):
        leaf = FakeLeaf(view or FakeView(name, path, view_type), parent=container, workspace=self)
        container.children.append(leaf)
        return leaf

    def add_floating(self, name):
        leaf = FakeLeaf(FakeView(name), parent=None, workspace=self)
        self.floating.append(leaf)
        return leaf

    def iterate_all_leaves(self):
        for container in self.containers:
            yield from list(container.children)
        yield from list(self.floating)

    async def async_set_active_leaf(self, leaf, focus=True):
        self.focus_requests.append((leaf, focus))
        self.active_leaf = leaf

    async def async_request_save_layout(self):
        self.save_requests += 1


class SettlingWorkspace(FakeWorkspace):
    def __init__(self):
        super().__init__()
        self.settle_calls = 0

    async def async_settle(self, leaves):
        self.settle_calls += 1
        return [leaf for leaf in leaves if not leaf.detached]


def names(container):
    return [leaf.view.display_text for leaf in container.children]


@pytest.fixture
def workspace():
    return FakeWorkspace()


@pytest.fixture
def make_workspace():
    """Factory: {"label": [names...]} -> FakeWorkspace with one group per label."""
    def _create(groups, container_cls=FakeContainer):
        ws = FakeWorkspace()
        for label, tab_names in groups.items():
            container = ws.add_container(container_cls(label))
            for name in tab_names:
                ws.add_tab(container, name=name)
        return ws
    return _create
