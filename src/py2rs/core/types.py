"""
Type and Literal Mapping.

Translates source type annotations into Rust types. Both Python typing
syntax (``Optional[List[int]]``, ``str | None``) and TypeScript-flavoured
vocabulary (``number[]``, ``Array<string>``, ``Record<string, number>``,
``T | undefined``) are accepted.

Translation is recursive: generic arguments are translated before the
enclosing type is assembled, so the renderer only ever sees finished Rust
text.
"""

import re
from typing import Dict, List, Mapping, Optional, Tuple

from py2rs.core.expressions import to_rust_expr
from py2rs.errors import TypeMappingError

ANY_TYPE = "Box<dyn std::any::Any>"
UNIT_TYPE = "()"

SCALAR_TYPES: Dict[str, str] = {
  "int": "i64",
  "float": "f64",
  "number": "f64",
  "complex": "(f64, f64)",
  "str": "String",
  "string": "String",
  "bool": "bool",
  "boolean": "bool",
  "bytes": "Vec<u8>",
  "bytearray": "Vec<u8>",
  "None": UNIT_TYPE,
  "NoneType": UNIT_TYPE,
  "void": UNIT_TYPE,
  "undefined": UNIT_TYPE,
  "null": UNIT_TYPE,
  "Any": ANY_TYPE,
  "any": ANY_TYPE,
  "object": ANY_TYPE,
  "unknown": ANY_TYPE,
}

_SEQUENCE_HEADS = {
  "List",
  "list",
  "Sequence",
  "MutableSequence",
  "Iterable",
  "Iterator",
  "Array",
  "ReadonlyArray",
  "Deque",
}
_MAPPING_HEADS = {"Dict", "dict", "Mapping", "MutableMapping", "Record", "Map", "DefaultDict", "OrderedDict"}
_SET_HEADS = {"Set", "set", "FrozenSet", "frozenset", "AbstractSet"}
_TUPLE_HEADS = {"Tuple", "tuple"}
_CALLABLE_HEADS = {"Callable"}

_TOKEN = re.compile(
  r"""\s*(?:
      (?P<string>'[^']*'|"[^"]*")
    | (?P<ellipsis>\.\.\.)
    | (?P<number>-?\d+(?:\.\d+)?)
    | (?P<name>[A-Za-z_][A-Za-z0-9_.]*)
    | (?P<array>\[\s*\])
    | (?P<punct>[\[\]<>,|()])
  )""",
  re.VERBOSE,
)


def _tokenize(text: str) -> List[Tuple[str, str]]:
  tokens = []
  pos = 0
  text = text.strip()
  while pos < len(text):
    m = _TOKEN.match(text, pos)
    if not m or m.end() == pos:
      raise TypeMappingError(f"Cannot parse type annotation: '{text}'")
    kind = m.lastgroup or "punct"
    tokens.append((kind, m.group(kind).strip()))
    pos = m.end()
    while pos < len(text) and text[pos].isspace():
      pos += 1
  return tokens


class _TypeParser:
  """
  Recursive descent over annotation tokens, emitting Rust text directly.

  Grammar::

      union   := postfix ('|' postfix)*
      postfix := primary ('[]')*
      primary := NAME [('[' args ']') | ('<' args '>')] | '[' args? ']' | '(' union ')' | STRING | '...'
  """

  def __init__(self, text: str, overrides: Mapping[str, str]):
    self.text = text
    self.tokens = _tokenize(text)
    self.pos = 0
    self.overrides = overrides

  def parse(self) -> str:
    if not self.tokens:
      raise TypeMappingError("Empty type annotation")
    result = self._union()
    if self.pos != len(self.tokens):
      raise TypeMappingError(f"Unexpected token '{self.tokens[self.pos][1]}' in '{self.text}'")
    return result

  def _peek(self) -> Optional[str]:
    if self.pos < len(self.tokens):
      return self.tokens[self.pos][1]
    return None

  def _next(self) -> Tuple[str, str]:
    if self.pos >= len(self.tokens):
      raise TypeMappingError(f"Unexpected end of annotation '{self.text}'")
    tok = self.tokens[self.pos]
    self.pos += 1
    return tok

  def _expect(self, value: str) -> None:
    _, got = self._next()
    if got != value:
      raise TypeMappingError(f"Expected '{value}' but found '{got}' in '{self.text}'")

  def _union(self) -> str:
    parts = [self._postfix()]
    while self._peek() == "|":
      self._next()
      parts.append(self._postfix())
    return _combine_union(parts)

  def _postfix(self) -> str:
    result = self._primary()
    while self.pos < len(self.tokens) and self.tokens[self.pos][0] == "array":
      self._next()
      result = f"Vec<{result}>"
    return result

  def _args(self, closer: str) -> List[str]:
    args: List[str] = []
    if self._peek() == closer:
      self._next()
      return args
    while True:
      args.append(self._union())
      tok = self._peek()
      if tok == ",":
        self._next()
        continue
      self._expect(closer)
      return args

  def _primary(self) -> str:
    kind, value = self._next()

    if kind == "string":
      # Forward reference ('Node') or a Literal member ('red')
      try:
        return _TypeParser(value[1:-1], self.overrides).parse()
      except TypeMappingError:
        return value
    if kind in ("ellipsis", "number"):
      return value
    if value == "(":
      inner = self._union()
      self._expect(")")
      return inner
    if value == "[":
      return "[" + ", ".join(self._args("]")) + "]"
    if kind == "array":
      return "[]"
    if kind != "name":
      raise TypeMappingError(f"Unexpected token '{value}' in '{self.text}'")

    nxt = self._peek()
    if nxt == "[" and self.tokens[self.pos][0] == "punct":
      self._next()
      return self._generic(value, self._args("]"))
    if nxt == "<":
      self._next()
      return self._generic(value, self._args(">"))
    return self._scalar(value)

  def _scalar(self, name: str) -> str:
    if name in self.overrides:
      return self.overrides[name]
    bare = _strip_module(name)
    if bare in self.overrides:
      return self.overrides[bare]
    return SCALAR_TYPES.get(bare, bare)

  def _generic(self, head: str, args: List[str]) -> str:
    bare = _strip_module(head)

    if bare == "Optional":
      return f"Option<{_single(args)}>"
    if bare == "Union":
      return _combine_union(args)
    if bare in _SEQUENCE_HEADS:
      return f"Vec<{_single(args)}>"
    if bare in _SET_HEADS:
      return f"HashSet<{_single(args)}>"
    if bare in _MAPPING_HEADS:
      key = args[0] if args else "_"
      val = args[1] if len(args) > 1 else "_"
      return f"HashMap<{key}, {val}>"
    if bare in _TUPLE_HEADS:
      if len(args) == 2 and args[1] == "...":
        return f"Vec<{args[0]}>"
      if len(args) == 1:
        return f"({args[0]},)"
      return "(" + ", ".join(args) + ")"
    if bare in _CALLABLE_HEADS:
      params = args[0] if args else "[]"
      ret = args[1] if len(args) > 1 else UNIT_TYPE
      inner = "..." if params == "..." else params.strip("[]")
      suffix = "" if ret == UNIT_TYPE else f" -> {ret}"
      return f"Box<dyn Fn({inner}){suffix}>"
    if bare in ("Promise", "Awaitable", "Coroutine"):
      return args[-1] if args else UNIT_TYPE
    if bare == "Literal":
      return _literal_type(args)
    if bare in ("Type", "type"):
      return _single(args)

    return f"{bare}<{', '.join(args)}>"


def _strip_module(name: str) -> str:
  return name.rsplit(".", 1)[-1]


def _single(args: List[str]) -> str:
  return args[0] if args else "_"


def _literal_type(args: List[str]) -> str:
  # Literal args arrive already translated; numeric literals stay digits
  if args and all(a.lstrip("-").isdigit() for a in args):
    return "i64"
  return "String"


def _combine_union(parts: List[str]) -> str:
  if len(parts) == 1:
    return parts[0]
  present = [p for p in dict.fromkeys(parts) if p != UNIT_TYPE]
  optional = UNIT_TYPE in parts
  if len(present) == 1:
    inner = present[0]
  else:
    inner = ANY_TYPE
  return f"Option<{inner}>" if optional else inner


def to_rust_type(annotation: Optional[str], overrides: Optional[Mapping[str, str]] = None) -> str:
  """
  Translates a source annotation into a Rust type.

  Args:
      annotation: Annotation source text. None or empty means "untyped".
      overrides: Scalar name substitutions applied before the builtin table.

  Returns:
      str: The Rust type. Untyped slots map to ``Box<dyn std::any::Any>``;
      unknown identifiers pass through unchanged.

  Raises:
      TypeMappingError: If the annotation is malformed.

  Example:
      >>> to_rust_type("Optional[List[int]]")
      'Option<Vec<i64>>'
      >>> to_rust_type("Record<string, number>")
      'HashMap<String, f64>'
  """
  if annotation is None or not annotation.strip():
    return ANY_TYPE
  return _TypeParser(annotation, overrides or {}).parse()


def is_optional_annotation(annotation: Optional[str]) -> bool:
  """Returns True if the annotation translates to an ``Option<...>``."""
  if not annotation:
    return False
  try:
    return to_rust_type(annotation).startswith("Option<")
  except TypeMappingError:
    return False


def borrowed(rust_type: str) -> str:
  """
  Converts an owned Rust type to its idiomatic borrowed parameter form.

  ``String`` becomes ``&str`` and ``Vec<T>`` becomes ``&[T]``; other types
  are returned unchanged.
  """
  if rust_type == "String":
    return "&str"
  if rust_type.startswith("Vec<") and rust_type.endswith(">"):
    return f"&[{rust_type[4:-1]}]"
  if rust_type.startswith(("HashMap<", "HashSet<")):
    return f"&{rust_type}"
  return rust_type


def to_rust_literal(value: Optional[str], rust_type: Optional[str] = None) -> str:
  """
  Translates a source default/initializer into a Rust expression.

  Args:
      value: Source text of the value. None means "no value".
      rust_type: The translated type of the slot, used to coerce numerics
          and wrap optional values.

  Returns:
      str: The Rust expression, ``Default::default()`` when no value exists.
  """
  if value is None:
    return "Default::default()"

  text = value.strip()

  if text == "None":
    return "None"
  if "default_factory" in text or text in ("[]", "{}", "list()", "dict()", "set()"):
    return "Default::default()"

  if rust_type and rust_type.startswith("Option<"):
    inner = rust_type[len("Option<") : -1]
    return f"Some({to_rust_literal(value, inner)})"

  if rust_type == "f64" and re.fullmatch(r"-?\d+", text):
    return f"{text}.0"

  expr = to_rust_expr(text)
  if rust_type == "String" and expr.startswith('"'):
    return f"{expr}.to_string()"
  return expr
