"""
Expression Translation.

Renders a Python expression as Rust source text. Used by rule binders for
comprehension elements and conditions, initializers, defaults and error
messages.

The translation is syntactic: operators, literals and a handful of builtins
and string methods are mapped to their Rust spelling. Anything the emitter
does not know is emitted verbatim, so the output is always produced even
when it is not valid Rust.
"""

import re
from typing import Callable, Dict, List, Optional

import libcst as cst

_EMPTY_MODULE = cst.Module(body=[])

_BINARY_OPS: Dict[type, str] = {
  cst.Add: "+",
  cst.Subtract: "-",
  cst.Multiply: "*",
  cst.Divide: "/",
  cst.FloorDivide: "/",
  cst.Modulo: "%",
  cst.BitAnd: "&",
  cst.BitOr: "|",
  cst.BitXor: "^",
  cst.LeftShift: "<<",
  cst.RightShift: ">>",
}

_COMPARISON_OPS: Dict[type, str] = {
  cst.Equal: "==",
  cst.NotEqual: "!=",
  cst.LessThan: "<",
  cst.LessThanEqual: "<=",
  cst.GreaterThan: ">",
  cst.GreaterThanEqual: ">=",
}

METHOD_RENAMES: Dict[str, str] = {
  "append": "push",
  "extend": "extend",
  "upper": "to_uppercase",
  "lower": "to_lowercase",
  "strip": "trim",
  "lstrip": "trim_start",
  "rstrip": "trim_end",
  "startswith": "starts_with",
  "endswith": "ends_with",
  "items": "iter",
  "copy": "clone",
  "pop": "pop",
  "keys": "keys",
  "values": "values",
}


_CHAR_ESCAPES: Dict[str, str] = {
  "\\": "\\\\",
  '"': '\\"',
  "\n": "\\n",
  "\r": "\\r",
  "\t": "\\t",
  "\0": "\\0",
}

# Unescaped double quote in raw f-string text
_BARE_QUOTE = re.compile(r'(?<!\\)"')


def code_for(node: cst.CSTNode) -> str:
  """Returns the verbatim source of a detached CST node."""
  return _EMPTY_MODULE.code_for_node(node)


def _escape_text(value: str) -> str:
  out = []
  for ch in value:
    if ch in _CHAR_ESCAPES:
      out.append(_CHAR_ESCAPES[ch])
    elif ord(ch) < 0x20 or ord(ch) == 0x7F:
      out.append(f"\\u{{{ord(ch):x}}}")
    else:
      out.append(ch)
  return "".join(out)


def rust_string(value: str) -> str:
  """Quotes a Python string value as a Rust string literal."""
  return '"' + _escape_text(value) + '"'


def rust_bytes(value: bytes) -> str:
  """
  Quotes a bytes value as a Rust byte string literal.

  Byte strings must stay ASCII: anything outside the printable range is
  written as a ``\\xNN`` escape.
  """
  out = []
  for byte in value:
    ch = chr(byte)
    if ch in _CHAR_ESCAPES:
      out.append(_CHAR_ESCAPES[ch])
    elif 0x20 <= byte < 0x7F:
      out.append(ch)
    else:
      out.append(f"\\x{byte:02x}")
  return 'b"' + "".join(out) + '"'


class ExpressionEmitter:
  """
  Converts LibCST expression nodes into Rust text.

  Dispatch is by node class name: ``_emit_<ClassName>``. Nodes without a
  handler fall back to their Python source.
  """

  def emit(self, node: cst.BaseExpression) -> str:
    handler: Optional[Callable[[cst.CSTNode], str]] = getattr(self, f"_emit_{type(node).__name__}", None)
    if handler is None:
      return code_for(node)
    text = handler(node)
    if getattr(node, "lpar", None):
      return f"({text})"
    return text

  def _emit_Name(self, node: cst.Name) -> str:
    return {"True": "true", "False": "false", "None": "None"}.get(node.value, node.value)

  def _emit_Integer(self, node: cst.Integer) -> str:
    return node.value

  def _emit_Float(self, node: cst.Float) -> str:
    return node.value

  def _emit_SimpleString(self, node: cst.SimpleString) -> str:
    value = node.evaluated_value
    if isinstance(value, bytes):
      return rust_bytes(value)
    return rust_string(value)

  def _emit_ConcatenatedString(self, node: cst.ConcatenatedString) -> str:
    value = node.evaluated_value
    if isinstance(value, str):
      return rust_string(value)
    return code_for(node)

  def _emit_FormattedString(self, node: cst.FormattedString) -> str:
    pieces: List[str] = []
    args: List[str] = []
    for part in node.parts:
      if isinstance(part, cst.FormattedStringText):
        pieces.append(self._format_text(node, part.value))
      elif isinstance(part, cst.FormattedStringExpression):
        spec = ""
        if part.format_spec:
          # Rust has no f/d/s presentation types; precision and width carry over
          spec = "".join(code_for(p) for p in part.format_spec).rstrip("fds")
        if part.conversion == "r":
          spec += "?"
        if spec:
          spec = ":" + spec
        if isinstance(part.expression, cst.Name):
          pieces.append("{" + part.expression.value + spec + "}")
        else:
          pieces.append("{" + spec + "}")
          args.append(self.emit(part.expression))
    fmt = '"' + "".join(pieces) + '"'
    if args:
      return f"format!({fmt}, {', '.join(args)})"
    return f"format!({fmt})"

  def _format_text(self, node: cst.FormattedString, text: str) -> str:
    """
    Re-escapes a literal f-string segment for a ``format!`` string.

    Python escapes are decoded first, so ``\\"`` is not escaped twice.
    Doubled braces stay doubled; ``format!`` reads them the same way.
    """
    prefix = node.prefix.replace("f", "")
    try:
      value = cst.SimpleString(f"{prefix}{node.quote}{text}{node.quote}").evaluated_value
    except (SyntaxError, ValueError):
      return _BARE_QUOTE.sub('\\\\"', text)
    return _escape_text(value)

  def _emit_Attribute(self, node: cst.Attribute) -> str:
    return f"{self.emit(node.value)}.{node.attr.value}"

  def _emit_BinaryOperation(self, node: cst.BinaryOperation) -> str:
    left, right = self.emit(node.left), self.emit(node.right)
    if isinstance(node.operator, cst.Power):
      method = "pow" if isinstance(node.right, cst.Integer) else "powf"
      return f"{left}.{method}({right})"
    if isinstance(node.operator, cst.MatrixMultiply):
      return f"{left}.dot(&{right})"
    op = _BINARY_OPS.get(type(node.operator), code_for(node.operator).strip())
    return f"{left} {op} {right}"

  def _emit_BooleanOperation(self, node: cst.BooleanOperation) -> str:
    op = "&&" if isinstance(node.operator, cst.And) else "||"
    return f"{self.emit(node.left)} {op} {self.emit(node.right)}"

  def _emit_UnaryOperation(self, node: cst.UnaryOperation) -> str:
    operand = self.emit(node.expression)
    compound = (cst.BinaryOperation, cst.BooleanOperation, cst.Comparison)
    if isinstance(node.expression, compound) and not node.expression.lpar:
      operand = f"({operand})"
    if isinstance(node.operator, (cst.Not, cst.BitInvert)):
      return f"!{operand}"
    if isinstance(node.operator, cst.Minus):
      return f"-{operand}"
    return operand

  def _emit_Comparison(self, node: cst.Comparison) -> str:
    clauses = []
    left_node = node.left
    for target in node.comparisons:
      clauses.append(self._compare(left_node, target.operator, target.comparator))
      left_node = target.comparator
    return " && ".join(clauses)

  def _compare(self, left: cst.BaseExpression, op: cst.BaseCompOp, right: cst.BaseExpression) -> str:
    lhs, rhs = self.emit(left), self.emit(right)
    is_none = isinstance(right, cst.Name) and right.value == "None"
    if isinstance(op, cst.Is) and is_none:
      return f"{lhs}.is_none()"
    if isinstance(op, cst.IsNot) and is_none:
      return f"{lhs}.is_some()"
    if isinstance(op, cst.In):
      return f"{rhs}.contains(&{lhs})"
    if isinstance(op, cst.NotIn):
      return f"!{rhs}.contains(&{lhs})"
    if isinstance(op, cst.Is):
      return f"std::ptr::eq(&{lhs}, &{rhs})"
    if isinstance(op, cst.IsNot):
      return f"!std::ptr::eq(&{lhs}, &{rhs})"
    return f"{lhs} {_COMPARISON_OPS[type(op)]} {rhs}"

  def _emit_Call(self, node: cst.Call) -> str:
    # Rust has no keyword or unpacked arguments
    if any(a.keyword is not None or a.star for a in node.args):
      return code_for(node.with_changes(lpar=(), rpar=()))
    args = [self.emit(a.value) for a in node.args]

    if isinstance(node.func, cst.Name):
      builtin = self._builtin_call(node.func.value, args)
      if builtin is not None:
        return builtin

    if isinstance(node.func, cst.Attribute):
      receiver = node.func.value
      method = node.func.attr.value
      # "sep".join(items) -> items.join("sep")
      if method == "join" and isinstance(receiver, (cst.SimpleString, cst.Name)) and len(args) == 1:
        return f"{args[0]}.join({self.emit(receiver)})"
      if method == "get" and args:
        rest = ", ".join(args[1:])
        if rest:
          return f"{self.emit(receiver)}.get(&{args[0]}).cloned().unwrap_or({rest})"
        return f"{self.emit(receiver)}.get(&{args[0]})"
      renamed = METHOD_RENAMES.get(method, method)
      return f"{self.emit(receiver)}.{renamed}({', '.join(args)})"

    return f"{self.emit(node.func)}({', '.join(args)})"

  def _builtin_call(self, name: str, args: List[str]) -> Optional[str]:
    if name == "len" and len(args) == 1:
      return f"{args[0]}.len()"
    if name == "str" and len(args) == 1:
      return f"{args[0]}.to_string()"
    if name == "abs" and len(args) == 1:
      return f"{args[0]}.abs()"
    if name == "int" and len(args) == 1:
      return f"({args[0]} as i64)"
    if name == "float" and len(args) == 1:
      return f"({args[0]} as f64)"
    if name == "bool" and len(args) == 1:
      return f"({args[0]} != 0)"
    if name == "sum" and len(args) == 1:
      return f"{args[0]}.iter().sum()"
    if name in ("min", "max") and len(args) == 2:
      return f"{args[0]}.{name}({args[1]})"
    if name in ("min", "max") and len(args) == 1:
      return f"{args[0]}.iter().{name}()"
    if name == "sorted" and len(args) == 1:
      return f"{{ let mut v = {args[0]}.clone(); v.sort(); v }}"
    if name == "print":
      if not args:
        return 'println!()'
      fmt = " ".join(["{}"] * len(args))
      return f'println!("{fmt}", {", ".join(args)})'
    if name == "range":
      if len(args) == 1:
        return f"(0..{args[0]})"
      if len(args) == 2:
        return f"({args[0]}..{args[1]})"
      if len(args) == 3:
        return f"({args[0]}..{args[1]}).step_by({args[2]} as usize)"
    return None

  def _emit_Subscript(self, node: cst.Subscript) -> str:
    value = self.emit(node.value)
    parts = []
    for element in node.slice:
      inner = element.slice
      if isinstance(inner, cst.Index):
        parts.append(self.emit(inner.value))
      elif isinstance(inner, cst.Slice):
        lower = self.emit(inner.lower) if inner.lower else ""
        upper = self.emit(inner.upper) if inner.upper else ""
        parts.append(f"{lower}..{upper}")
    return f"{value}[{', '.join(parts)}]"

  def _emit_List(self, node: cst.List) -> str:
    return f"vec![{', '.join(self.emit(e.value) for e in node.elements)}]"

  def _emit_Tuple(self, node: cst.Tuple) -> str:
    items = [self.emit(e.value) for e in node.elements]
    if len(items) == 1:
      return f"{items[0]}," if node.lpar else f"({items[0]},)"
    # lpar is handled by emit(); bare tuples still need parens in Rust
    if getattr(node, "lpar", None):
      return ", ".join(items)
    return f"({', '.join(items)})"

  def _emit_Set(self, node: cst.Set) -> str:
    return f"HashSet::from([{', '.join(self.emit(e.value) for e in node.elements)}])"

  def _emit_Dict(self, node: cst.Dict) -> str:
    pairs = []
    for element in node.elements:
      if isinstance(element, cst.DictElement):
        pairs.append(f"({self.emit(element.key)}, {self.emit(element.value)})")
    if not pairs:
      return "HashMap::new()"
    return f"HashMap::from([{', '.join(pairs)}])"

  def _emit_IfExp(self, node: cst.IfExp) -> str:
    return f"if {self.emit(node.test)} {{ {self.emit(node.body)} }} else {{ {self.emit(node.orelse)} }}"

  def _emit_Lambda(self, node: cst.Lambda) -> str:
    params = ", ".join(p.name.value for p in node.params.params)
    return f"|{params}| {self.emit(node.body)}"


def to_rust_expr(source: str) -> str:
  """
  Translates a Python expression's source text to Rust.

  Args:
      source: Python expression text (e.g. ``x ** 2 if x > 0 else 0``).

  Returns:
      str: Rust expression text. Source that does not parse as a Python
      expression is returned unchanged.

  Example:
      >>> to_rust_expr("len(xs) > 0 and not done")
      'xs.len() > 0 && !done'
  """
  try:
    node = cst.parse_expression(source.strip())
  except cst.ParserSyntaxError:
    return source.strip()
  return ExpressionEmitter().emit(node)
