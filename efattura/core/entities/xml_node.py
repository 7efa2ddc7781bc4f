"""
Typed tree for array-preserving parsed XML.

The invoice XML is consumed as a tree where every element maps a tag name
to an ordered sequence of child nodes, even when the tag occurs once. A
node is either a ``Scalar`` (leaf text) or an ``Element`` (nested tags).

The accessor functions at the bottom of the module implement the
safe-extract rule used by the normalizer: walking a path never fails,
a missing step simply yields an empty sequence.
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Scalar:
    """Leaf node holding the element text."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Element:
    """Element node: tag name -> ordered sequence of child nodes."""

    children: Mapping[str, tuple["Node", ...]] = field(default_factory=dict)

    def get(self, tag: str) -> tuple["Node", ...]:
        """Return the children registered under *tag* (possibly empty)."""
        return self.children.get(tag, ())

    def tags(self) -> Iterator[str]:
        return iter(self.children)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Element":
        """Build a typed tree from a generic ``{tag: [child, ...]}`` mapping.

        Accepts the shape produced by explicit-array XML converters.
        Singular values are wrapped in a one-element sequence, ``None``
        becomes an empty scalar and the attribute bucket ``$`` is ignored.
        """
        children: dict[str, tuple[Node, ...]] = {}
        for tag, value in data.items():
            if tag == "$":
                continue
            values = value if isinstance(value, (list, tuple)) else [value]
            children[tag] = tuple(_to_node(v) for v in values)
        return cls(children=children)


Node = Union[Scalar, Element]


def _to_node(value: Any) -> Node:
    if isinstance(value, (Scalar, Element)):
        return value
    if isinstance(value, Mapping):
        # Text element carrying attributes: {"_": "text", "$": {...}}
        if "_" in value and set(value) <= {"_", "$"}:
            return Scalar(str(value["_"]))
        return Element.from_mapping(value)
    if value is None:
        return Scalar("")
    return Scalar(str(value))


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------


def first(nodes: Sequence[Node]) -> Node | None:
    """First node of a sequence, or None when empty."""
    return nodes[0] if nodes else None


def descend(node: Node | None, *path: str) -> tuple[Node, ...]:
    """Walk *path* from *node*, taking the first child at every step.

    Returns the sequence addressed by the last tag. Any missing step,
    or a scalar where an element is expected, yields ``()``.
    """
    if not path:
        return (node,) if node is not None else ()
    current = node
    for tag in path[:-1]:
        if not isinstance(current, Element):
            return ()
        current = first(current.get(tag))
    if not isinstance(current, Element):
        return ()
    return current.get(path[-1])


def child(node: Node | None, *path: str) -> Node | None:
    """First node found at *path*, or None."""
    return first(descend(node, *path))


def first_present(node: Node | None, *tags: str) -> Node | None:
    """First node found under any of the alternative *tags*, in order."""
    for tag in tags:
        found = child(node, tag)
        if found is not None:
            return found
    return None


def safe_extract(nodes: Sequence[Node], default: T) -> str | T:
    """Resolve a possibly-absent sequence to a string.

    Absent or empty sequences resolve to *default*; otherwise the first
    node is stringified. Elements have no scalar value and also resolve
    to *default*.
    """
    node = first(nodes)
    if isinstance(node, Scalar):
        return node.value
    return default


def extract_all(nodes: Sequence[Node]) -> list[str]:
    """Text of every scalar in *nodes*, in document order."""
    return [n.value for n in nodes if isinstance(n, Scalar)]
