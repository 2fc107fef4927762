import pytest

from dotnet_deserialization import ParentIndex, AncestorLookupFailure


class Root:
    pass


class Branch:
    pass


class Leaf:
    pass


@pytest.fixture
def index():
    tree = ParentIndex()
    root = tree.add(Root())
    branch = tree.add(Branch(), parent=root)
    tree.add(Leaf(), parent=branch)
    tree.add(Leaf())  # separate root
    return tree


def test_finds_nearest_ancestor(index):
    assert isinstance(index.get_ancestor(2, Branch), Branch)
    assert isinstance(index.get_ancestor(2, Root), Root)


def test_node_itself_matches(index):
    assert index.get_ancestor(2, Leaf) is index.node(2)


def test_tuple_of_types(index):
    assert isinstance(index.get_ancestor(2, (Root, Branch)), Branch)


def test_required_search_raises(index):
    with pytest.raises(AncestorLookupFailure, match="Branch"):
        index.get_ancestor(3, Branch)


def test_optional_search_returns_none(index):
    assert index.get_ancestor(3, Branch, required=False) is None
    assert index.get_ancestor(0, Leaf, required=False) is None


def test_parent_bookkeeping(index):
    assert len(index) == 4
    assert index.parent_of(0) is None
    assert index.parent_of(2) == 1
    assert index.parent_of(3) is None


def test_parent_must_exist():
    tree = ParentIndex()
    with pytest.raises(IndexError):
        tree.add(Leaf(), parent=0)
