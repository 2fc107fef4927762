"""
Parent-index tree for upward ancestor searches.

Nodes never hold a reference to their parent. Instead the index keeps a
parallel list of parent positions, so a record tree can be walked upward
without back-pointers embedded in the (immutable) records.
"""

from typing import Any, List, Optional

from ..errors import AncestorLookupFailure


class ParentIndex:
    """
    Flat node list with a parallel parent-position list.

    Usage:
        index = ParentIndex()
        root = index.add(class_record)
        child = index.add(string_record, parent=root)
        index.get_ancestor(child, ClassWithMembersAndTypes)  # -> class_record
    """

    def __init__(self):
        self._nodes: List[Any] = []
        self._parents: List[Optional[int]] = []

    def add(self, node: Any, parent: Optional[int] = None) -> int:
        """
        Append a node.

        Args:
            node: The node object
            parent: Index of the parent node, or None for a root

        Returns:
            Index of the new node
        """
        if parent is not None and not 0 <= parent < len(self._nodes):
            raise IndexError(f"Parent index {parent} out of range")
        self._nodes.append(node)
        self._parents.append(parent)
        return len(self._nodes) - 1

    def node(self, index: int) -> Any:
        return self._nodes[index]

    def parent_of(self, index: int) -> Optional[int]:
        return self._parents[index]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self):
        return iter(self._nodes)

    def get_ancestor(self, index: int, ancestor_type: type, required: bool = True) -> Optional[Any]:
        """
        Find the nearest node of ancestor_type, starting with the node itself.

        Args:
            index: Index of the starting node
            ancestor_type: Type (or tuple of types) to search for
            required: Raise when no ancestor is found instead of returning None

        Returns:
            The matching node, or None when not found and not required

        Raises:
            AncestorLookupFailure: No match before reaching a root (required mode)
        """
        current: Optional[int] = index
        # Parents always precede children, so depth is bounded by node count
        for _ in range(len(self._nodes)):
            if current is None:
                break
            if isinstance(self._nodes[current], ancestor_type):
                return self._nodes[current]
            current = self._parents[current]

        if required:
            name = getattr(ancestor_type, '__name__', str(ancestor_type))
            raise AncestorLookupFailure(f"Failed to find ancestor {name}")
        return None
