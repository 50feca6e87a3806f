"""
Source node representation.

A `SourceNode` is the unit the matcher consumes: a capability-tagged view of
one source construct (class, function, raise, ...) with its named captured
fragments. Nodes are immutable once produced; captures are exposed through a
read-only mapping and list-like captures are stored as tuples.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple

from py2rs.enums import NodeKind, NodeTag


@dataclass(frozen=True)
class Field:
  """
  A named, optionally typed slot: record field or function parameter.

  `annotation` and `default` hold source text, not evaluated values.
  """

  name: str
  annotation: Optional[str] = None
  default: Optional[str] = None
  star: str = ""  # "*" or "**" for variadic parameters


@dataclass(frozen=True)
class Method:
  name: str
  params: Tuple[Field, ...] = ()
  returns: Optional[str] = None
  receiver: Optional[str] = None  # "&self", "&mut self" or None for static methods
  abstract: bool = False
  raises: bool = False


@dataclass(frozen=True)
class Member:
  """Plain class-level assignment (enum variants)."""

  name: str
  value: Optional[str] = None


@dataclass(frozen=True)
class SourceNode:
  """
  Immutable, tagged unit of input.

  Attributes:
      kind (NodeKind): Structural shape of the construct.
      captures (Mapping[str, Any]): Named fragments extracted at ingestion.
      tags (FrozenSet[NodeTag]): Capability tags predicates can test.
      source (str): The original source text of the construct.
  """

  kind: NodeKind
  captures: Mapping[str, Any] = field(default_factory=dict)
  tags: FrozenSet[NodeTag] = frozenset()
  source: str = ""

  def __post_init__(self) -> None:
    frozen_caps = {k: _freeze(v) for k, v in dict(self.captures).items()}
    object.__setattr__(self, "kind", NodeKind(self.kind))
    object.__setattr__(self, "captures", MappingProxyType(frozen_caps))
    object.__setattr__(self, "tags", frozenset(NodeTag(t) for t in self.tags))

  def __hash__(self) -> int:
    return hash((self.kind, _hashable(self.captures), self.tags, self.source))

  def has(self, *tags: NodeTag) -> bool:
    """Returns True if every given tag is present."""
    return all(t in self.tags for t in tags)

  def get(self, name: str, default: Any = None) -> Any:
    return self.captures.get(name, default)

  def describe(self) -> str:
    """Short label used in diagnostics, e.g. ``class_def 'Point'``."""
    name = self.captures.get("name")
    if name:
      return f"{self.kind.value} '{name}'"
    return self.kind.value


def _freeze(value: Any) -> Any:
  if isinstance(value, list):
    return tuple(_freeze(v) for v in value)
  if isinstance(value, (set, frozenset)):
    return frozenset(value)
  return value


def _hashable(value: Any) -> Any:
  if isinstance(value, Mapping):
    return tuple(sorted((k, _hashable(v)) for k, v in value.items()))
  if isinstance(value, (tuple, list)):
    return tuple(_hashable(v) for v in value)
  return value


def make_node(
  kind: NodeKind,
  source: str = "",
  tags: Iterable[NodeTag] = (),
  **captures: Any,
) -> SourceNode:
  """
  Convenience constructor for pre-parsed nodes.

  Example:
      >>> make_node(NodeKind.RAISE, tags=[NodeTag.HAS_MESSAGE], error_type="ValueError", message='"boom"')
  """
  return SourceNode(kind=kind, captures=captures, tags=frozenset(tags), source=source)
