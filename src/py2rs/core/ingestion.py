"""
Ingestion logic for turning Python source into `SourceNode` objects.

The fragment is parsed with LibCST and every top-level statement becomes one
node. Ingestion is shallow: it recognises the constructs the rule catalog
understands (classes, functions, raises, annotated bindings and
comprehensions), records their captures as source text, and attaches the
capability tags the triggers test. Everything else becomes an `unsupported`
node carrying its verbatim source.

Imports of typing helpers (``typing``, ``dataclasses``, ``enum``, ``abc``,
``__future__``) have no Rust counterpart and are dropped.
"""

from typing import Dict, List, Optional, Set, Union

import libcst as cst

from py2rs.core.expressions import code_for
from py2rs.core.nodes import Field, Member, Method, SourceNode
from py2rs.core.types import is_optional_annotation
from py2rs.enums import NodeKind, NodeTag
from py2rs.errors import IngestionError

IGNORED_IMPORTS = {"typing", "typing_extensions", "dataclasses", "enum", "abc", "__future__"}

RECORD_DECORATORS = {"dataclass", "define", "frozen", "attrs", "s"}
RECORD_BASES = {"NamedTuple", "TypedDict", "BaseModel"}
ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}
ABSTRACT_BASES = {"ABC", "Protocol"}


def _bare(dotted: str) -> str:
  """``dataclasses.dataclass(frozen=True)`` -> ``dataclass``."""
  return dotted.split("(", 1)[0].rsplit(".", 1)[-1].strip()


class _RaiseScanner(cst.CSTVisitor):
  """
  Detects `raise` statements in a function body.

  Nested function and class definitions are not entered: their raises do
  not make the enclosing function fallible.
  """

  def __init__(self) -> None:
    self.found = False

  def visit_Raise(self, node: cst.Raise) -> None:
    self.found = True

  def visit_FunctionDef(self, node: cst.FunctionDef) -> bool:
    return False

  def visit_ClassDef(self, node: cst.ClassDef) -> bool:
    return False


class _SelfMutationScanner(cst.CSTVisitor):
  """
  Detects assignments to attributes of `self` (``self.x = ...``,
  ``self.x += ...``), which require a ``&mut self`` receiver.
  """

  def __init__(self) -> None:
    self.found = False

  def _check(self, target: cst.BaseExpression) -> None:
    if isinstance(target, cst.Attribute) and isinstance(target.value, cst.Name) and target.value.value == "self":
      self.found = True

  def visit_AssignTarget(self, node: cst.AssignTarget) -> None:
    self._check(node.target)

  def visit_AugAssign(self, node: cst.AugAssign) -> None:
    self._check(node.target)

  def visit_AnnAssign(self, node: cst.AnnAssign) -> None:
    self._check(node.target)


def _body_contains(body: cst.BaseSuite, scanner: Union[_RaiseScanner, _SelfMutationScanner]) -> bool:
  body.visit(scanner)
  return scanner.found


def _small_statements(suite: cst.BaseSuite) -> List[Union[cst.BaseSmallStatement, cst.BaseCompoundStatement]]:
  """Flattens a suite into small statements and compound statements, in order."""
  items: List[Union[cst.BaseSmallStatement, cst.BaseCompoundStatement]] = []
  if isinstance(suite, cst.SimpleStatementSuite):
    return list(suite.body)
  for stmt in suite.body:
    if isinstance(stmt, cst.SimpleStatementLine):
      items.extend(stmt.body)
    else:
      items.append(stmt)
  return items


def _param_fields(params: cst.Parameters) -> List[Field]:
  fields: List[Field] = []

  def _field(p: cst.Param, star: str = "") -> Field:
    annotation = code_for(p.annotation.annotation) if p.annotation else None
    default = code_for(p.default) if p.default else None
    return Field(name=p.name.value, annotation=annotation, default=default, star=star)

  for p in [*params.posonly_params, *params.params]:
    fields.append(_field(p))
  if isinstance(params.star_arg, cst.Param):
    fields.append(_field(params.star_arg, "*"))
  for p in params.kwonly_params:
    fields.append(_field(p))
  if params.star_kwarg:
    fields.append(_field(params.star_kwarg, "**"))
  return fields


def _method(fn: cst.FunctionDef) -> Method:
  """Extracts the signature of a function definition."""
  decorators = {_bare(code_for(d.decorator)) for d in fn.decorators}
  params = _param_fields(fn.params)

  receiver: Optional[str] = None
  if params and params[0].name == "self" and "staticmethod" not in decorators:
    params = params[1:]
    receiver = "&mut self" if _body_contains(fn.body, _SelfMutationScanner()) else "&self"
  elif params and params[0].name == "cls" and "classmethod" in decorators:
    params = params[1:]

  return Method(
    name=fn.name.value,
    params=tuple(params),
    returns=code_for(fn.returns.annotation) if fn.returns else None,
    receiver=receiver,
    abstract="abstractmethod" in decorators,
    raises=_body_contains(fn.body, _RaiseScanner()),
  )


def _init_fields(fn: cst.FunctionDef) -> List[Field]:
  """
  Harvests instance attributes declared in ``__init__``.

  ``self.x: T = ...`` uses its own annotation; ``self.x = param`` borrows
  the annotation of the matching parameter.
  """
  param_types: Dict[str, Optional[str]] = {f.name: f.annotation for f in _param_fields(fn.params)}
  fields: List[Field] = []
  for small in _small_statements(fn.body):
    if isinstance(small, cst.AnnAssign) and _is_self_attr(small.target):
      fields.append(Field(name=small.target.attr.value, annotation=code_for(small.annotation.annotation)))
    elif isinstance(small, cst.Assign):
      for target in small.targets:
        if not _is_self_attr(target.target):
          continue
        annotation = None
        if isinstance(small.value, cst.Name):
          annotation = param_types.get(small.value.value)
        fields.append(Field(name=target.target.attr.value, annotation=annotation))
  return fields


def _is_self_attr(node: cst.BaseExpression) -> bool:
  return isinstance(node, cst.Attribute) and isinstance(node.value, cst.Name) and node.value.value == "self"


def _class_node(stmt: cst.ClassDef, source: str) -> SourceNode:
  bases = [code_for(arg.value) for arg in stmt.bases]
  bases = [b for b in bases if b != "object"]
  bare_bases = [_bare(b) for b in bases]
  decorators = [code_for(d.decorator) for d in stmt.decorators]
  metaclass = next((code_for(k.value) for k in stmt.keywords if k.keyword and k.keyword.value == "metaclass"), "")

  fields: List[Field] = []
  members: List[Member] = []
  methods: List[Method] = []
  seen: Set[str] = set()

  for item in _small_statements(stmt.body):
    if isinstance(item, cst.AnnAssign) and isinstance(item.target, cst.Name):
      default = code_for(item.value) if item.value else None
      fields.append(Field(item.target.value, code_for(item.annotation.annotation), default))
      seen.add(item.target.value)
    elif isinstance(item, cst.Assign) and len(item.targets) == 1 and isinstance(item.targets[0].target, cst.Name):
      members.append(Member(item.targets[0].target.value, code_for(item.value)))
    elif isinstance(item, cst.FunctionDef):
      name = item.name.value
      if name == "__init__":
        for f in _init_fields(item):
          if f.name not in seen:
            fields.append(f)
            seen.add(f.name)
      elif not (name.startswith("__") and name.endswith("__")):
        methods.append(_method(item))

  tags: Set[NodeTag] = set()
  if any(_bare(d) in RECORD_DECORATORS for d in decorators) or any(b in RECORD_BASES for b in bare_bases):
    tags.add(NodeTag.DATACLASS)
  if any(b in ENUM_BASES for b in bare_bases):
    tags.add(NodeTag.ENUM_BASE)
  if any(b.endswith(("Exception", "Error")) for b in bare_bases):
    tags.add(NodeTag.EXCEPTION_BASE)
  if any(b in ABSTRACT_BASES for b in bare_bases) or _bare(metaclass) == "ABCMeta":
    tags.add(NodeTag.ABSTRACT)

  markers = RECORD_BASES | ENUM_BASES | ABSTRACT_BASES
  user_bases = [
    b for b, bare in zip(bases, bare_bases) if bare not in markers and not bare.endswith(("Exception", "Error"))
  ]
  if user_bases:
    tags.add(NodeTag.HAS_BASES)
  if any(f.default is not None for f in fields):
    tags.add(NodeTag.HAS_DEFAULTS)
  if any(is_optional_annotation(f.annotation) for f in fields):
    tags.add(NodeTag.HAS_OPTIONAL_FIELDS)
  if methods:
    tags.add(NodeTag.HAS_METHODS)

  captures = {
    "name": stmt.name.value,
    "bases": bases,
    "decorators": decorators,
    "fields": fields,
    "members": members,
    "methods": methods,
  }
  if user_bases:
    captures["base"] = user_bases[0]
  return SourceNode(kind=NodeKind.CLASS_DEF, captures=captures, tags=frozenset(tags), source=source)


def _function_node(stmt: cst.FunctionDef, source: str) -> SourceNode:
  sig = _method(stmt)
  tags: Set[NodeTag] = set()
  if sig.raises:
    tags.add(NodeTag.RAISES)
  if sig.receiver:
    tags.add(NodeTag.METHOD)
  captures = {
    "name": sig.name,
    "params": sig.params,
    "returns": sig.returns,
    "receiver": sig.receiver,
    "is_async": stmt.asynchronous is not None,
  }
  return SourceNode(kind=NodeKind.FUNCTION_DEF, captures=captures, tags=frozenset(tags), source=source)


def _raise_node(stmt: cst.Raise, source: str) -> SourceNode:
  exc = stmt.exc
  captures: Dict[str, object] = {"error_type": ""}
  tags: Set[NodeTag] = set()

  if isinstance(exc, cst.Call):
    captures["error_type"] = code_for(exc.func)
    positional = [a for a in exc.args if a.keyword is None and not a.star]
    if positional:
      captures["message"] = code_for(positional[0].value)
      tags.add(NodeTag.HAS_MESSAGE)
  elif exc is not None:
    captures["error_type"] = code_for(exc)

  return SourceNode(kind=NodeKind.RAISE, captures=captures, tags=frozenset(tags), source=source)


def _ann_assign_node(stmt: cst.AnnAssign, source: str) -> Optional[SourceNode]:
  if not isinstance(stmt.target, cst.Name):
    return None
  annotation = code_for(stmt.annotation.annotation)
  value = code_for(stmt.value) if stmt.value else None
  tags: Set[NodeTag] = set()
  if is_optional_annotation(annotation) or value == "None":
    tags.add(NodeTag.OPTIONAL)
  captures = {"name": stmt.target.value, "annotation": annotation, "value": value}
  return SourceNode(kind=NodeKind.ANNOTATED_ASSIGN, captures=captures, tags=frozenset(tags), source=source)


_COMPREHENSION_TAGS = {
  cst.ListComp: NodeTag.LIST_COMP,
  cst.SetComp: NodeTag.SET_COMP,
  cst.DictComp: NodeTag.DICT_COMP,
  cst.GeneratorExp: NodeTag.GENERATOR,
}


def _comprehension_node(
  comp: cst.BaseComp, target: Optional[str], source: str
) -> Optional[SourceNode]:
  for_in = comp.for_in
  if for_in.inner_for_in is not None or for_in.asynchronous is not None:
    return None

  tags = {_COMPREHENSION_TAGS[type(comp)]}
  captures: Dict[str, object] = {
    "variable": code_for(for_in.target),
    "iterable": code_for(for_in.iter),
  }
  if isinstance(comp, cst.DictComp):
    captures["key"] = code_for(comp.key)
    captures["value"] = code_for(comp.value)
  else:
    captures["element"] = code_for(comp.elt)
  if for_in.ifs:
    tags.add(NodeTag.FILTERED)
    captures["condition"] = " and ".join(
      f"({code_for(i.test)})" if len(for_in.ifs) > 1 else code_for(i.test) for i in for_in.ifs
    )
  if target:
    captures["target"] = target
  return SourceNode(kind=NodeKind.COMPREHENSION, captures=captures, tags=frozenset(tags), source=source)


def _is_ignored_import(small: cst.BaseSmallStatement) -> bool:
  if isinstance(small, cst.Import):
    return all(code_for(alias.name).split(".")[0] in IGNORED_IMPORTS for alias in small.names)
  if isinstance(small, cst.ImportFrom) and small.module is not None and not small.relative:
    return code_for(small.module).split(".")[0] in IGNORED_IMPORTS
  return False


def _simple_node(small: cst.BaseSmallStatement, source: str) -> Optional[SourceNode]:
  if isinstance(small, cst.Raise):
    return _raise_node(small, source)
  if isinstance(small, cst.AnnAssign):
    return _ann_assign_node(small, source)
  if isinstance(small, cst.Assign) and len(small.targets) == 1 and isinstance(small.value, cst.BaseComp):
    target = small.targets[0].target
    if isinstance(target, cst.Name):
      return _comprehension_node(small.value, target.value, source)
  if isinstance(small, cst.Expr) and isinstance(small.value, cst.BaseComp):
    return _comprehension_node(small.value, None, source)
  return None


def statement_to_node(stmt: cst.BaseStatement, module: cst.Module) -> Optional[SourceNode]:
  """
  Converts one top-level statement into a node.

  Args:
      stmt: The statement.
      module: The enclosing module (used to recover verbatim source).

  Returns:
      SourceNode: The ingested node, `unsupported` when no shape applies.
      None: If the statement is an ignored import.
  """
  source = module.code_for_node(stmt).strip()

  node: Optional[SourceNode] = None
  if isinstance(stmt, cst.ClassDef):
    node = _class_node(stmt, source)
  elif isinstance(stmt, cst.FunctionDef):
    node = _function_node(stmt, source)
  elif isinstance(stmt, cst.SimpleStatementLine):
    if all(_is_ignored_import(s) for s in stmt.body):
      return None
    if len(stmt.body) == 1:
      node = _simple_node(stmt.body[0], source)

  if node is None:
    node = SourceNode(kind=NodeKind.UNSUPPORTED, captures={}, source=source)
  return node


def ingest(code: str) -> List[SourceNode]:
  """
  Parses a Python fragment into source nodes, one per top-level statement.

  Args:
      code: Python source text.

  Returns:
      List[SourceNode]: Nodes in source order.

  Raises:
      IngestionError: If the fragment is not valid Python.
  """
  try:
    module = cst.parse_module(code)
  except cst.ParserSyntaxError as e:
    raise IngestionError(f"Cannot parse fragment: {e.message} (line {e.raw_line}, column {e.raw_column})") from e

  nodes = []
  for stmt in module.body:
    node = statement_to_node(stmt, module)
    if node is not None:
      nodes.append(node)
  return nodes

