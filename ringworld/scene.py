"""Scene attachment for ring segments.

The host scene graph is opaque: the ring builder only creates named
placeholders, parents them, sets their transform, and destroys them.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class SceneHost(Protocol):
    def create_placeholder(self, name: str) -> Any:
        ...

    def destroy(self, handle: Any) -> None:
        ...

    def set_parent(self, handle: Any, parent: Any) -> None:
        ...

    def set_transform(self, handle: Any, position=(0.0, 0.0, 0.0),
                      rotation=(0.0, 0.0, 0.0)) -> None:
        ...


@dataclass
class SceneNode:
    handle: int
    name: str
    parent: Optional[int] = None
    position: tuple = (0.0, 0.0, 0.0)
    rotation: tuple = (0.0, 0.0, 0.0)
    children: list = field(default_factory=list)


class InMemorySceneHost:
    """Scene host that keeps nodes in a dict; destroying a node destroys
    its children."""

    def __init__(self) -> None:
        self.nodes: dict[int, SceneNode] = {}
        self._ids = itertools.count(1)

    def create_placeholder(self, name: str) -> int:
        node = SceneNode(handle=next(self._ids), name=name)
        self.nodes[node.handle] = node
        return node.handle

    def destroy(self, handle: int) -> None:
        node = self.nodes.pop(handle, None)
        if node is None:
            logger.debug(f"Scene node {handle} already destroyed")
            return
        if node.parent is not None and node.parent in self.nodes:
            self.nodes[node.parent].children.remove(handle)
        for child in list(node.children):
            self.destroy(child)

    def set_parent(self, handle: int, parent: Optional[int]) -> None:
        node = self.nodes[handle]
        if node.parent is not None and node.parent in self.nodes:
            self.nodes[node.parent].children.remove(handle)
        node.parent = parent
        if parent is not None:
            self.nodes[parent].children.append(handle)

    def set_transform(self, handle: int, position=(0.0, 0.0, 0.0),
                      rotation=(0.0, 0.0, 0.0)) -> None:
        node = self.nodes[handle]
        node.position = tuple(position)
        node.rotation = tuple(rotation)

    def children_of(self, handle: int) -> list:
        return [self.nodes[h].name for h in self.nodes[handle].children]

    def __contains__(self, handle) -> bool:
        return handle in self.nodes
