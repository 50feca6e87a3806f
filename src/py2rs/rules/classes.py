"""
Class Rules.

Maps class shapes to Rust items:

- Enum subclasses become ``enum``s.
- Exception subclasses become error structs implementing ``Display`` and
  ``std::error::Error``.
- ABCs and Protocols become ``trait``s.
- Records (dataclasses, NamedTuples, TypedDicts, pydantic models) become
  ``struct``s; records with defaults also get an ``impl Default``.
- Classes inheriting a user-defined base become a struct plus an
  ``impl Base for Name`` block.
- Any remaining class becomes a struct with an inherent ``impl`` block.

Order matters: each rule is registered before the more general rule that
would also accept its nodes.
"""

import re
from typing import Dict

from py2rs.core.context import INDENT, RuleContext
from py2rs.core.nodes import SourceNode
from py2rs.core.schema import Rule, Trigger
from py2rs.enums import NodeKind, NodeTag
from py2rs.rules.utils import field_lines, impl_block, method_stub, pascal_case, signature, spaced

_INT_LITERAL = re.compile(r"-?\d+")


def bind_enum(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  variants = []
  for member in node.get("members", ()):
    variant = pascal_case(member.name)
    if member.value and _INT_LITERAL.fullmatch(member.value.strip()):
      variants.append(f"{variant} = {member.value.strip()},")
    else:
      variants.append(f"{variant},")
  return {
    "name": node.get("name"),
    "attributes": ctx.attributes(),
    "variants": ctx.block(variants),
  }


def bind_error_type(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  extra = [f for f in node.get("fields", ()) if f.name != "message"]
  return {
    "name": node.get("name"),
    "attributes": ctx.attributes(),
    "fields": field_lines(extra, ctx),
  }


def bind_trait(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  """
  Abstract methods become declarations; concrete ones keep a default body.
  Annotated attributes become getter declarations, since traits hold no fields.
  """
  items = []
  for f in node.get("fields", ()):
    items.append(f"fn {f.name}(&self) -> {ctx.rust_type(f.annotation)};")
  protocol = any(b.rsplit(".", 1)[-1] == "Protocol" for b in node.get("bases", ()))
  for m in node.get("methods", ()):
    if m.abstract or protocol:
      sig = signature(m.name, m.params, m.returns, ctx, receiver=m.receiver, fallible=m.raises, visibility="")
      items.append(f"{sig};")
    else:
      items.append(method_stub(m, ctx, visibility=""))
  return {"name": node.get("name"), "signatures": ctx.block(items)}


def bind_record(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  name = node.get("name")
  fields = node.get("fields", ())
  defaults = [f"{f.name}: {ctx.literal(f.default, ctx.rust_type(f.annotation))}," for f in fields]
  return {
    "name": name,
    "attributes": ctx.attributes(),
    "fields": field_lines(fields, ctx),
    "defaults": ctx.block(defaults, depth=3),
    "impl_block": impl_block(name, node.get("methods", ()), ctx),
  }


def bind_trait_impl(node: SourceNode, ctx: RuleContext) -> Dict[str, str]:
  name = node.get("name")
  stubs = [method_stub(m, ctx, visibility="") for m in node.get("methods", ())]
  return {
    "name": name,
    "base": node.get("base"),
    "attributes": ctx.attributes(),
    "fields": field_lines(node.get("fields", ()), ctx),
    "methods": ctx.block(spaced(stubs)),
  }


RULES = [
  Rule(
    name="enum",
    trigger=Trigger(kind=NodeKind.CLASS_DEF, require={NodeTag.ENUM_BASE}),
    template="${attributes}pub enum ${name} {${variants}\n}",
    binder=bind_enum,
    description="Enum subclass -> Rust enum",
  ),
  Rule(
    name="error_type",
    trigger=Trigger(kind=NodeKind.CLASS_DEF, require={NodeTag.EXCEPTION_BASE}),
    template=(
      "${attributes}pub struct ${name} {\n"
      f"{INDENT}pub message: String,${{fields}}\n"
      "}\n"
      "\n"
      "impl ${name} {\n"
      f"{INDENT}pub fn new(message: impl Into<String>) -> Self {{\n"
      f"{INDENT * 2}Self {{ message: message.into() }}\n"
      f"{INDENT}}}\n"
      "}\n"
      "\n"
      "impl std::fmt::Display for ${name} {\n"
      f"{INDENT}fn fmt(&self, f: &mut std::fmt::Formatter<'_>) -> std::fmt::Result {{\n"
      f'{INDENT * 2}write!(f, "{{}}", self.message)\n'
      f"{INDENT}}}\n"
      "}\n"
      "\n"
      "impl std::error::Error for ${name} {}"
    ),
    binder=bind_error_type,
    description="Exception subclass -> error struct implementing std::error::Error",
  ),
  Rule(
    name="abstract_trait",
    trigger=Trigger(kind=NodeKind.CLASS_DEF, require={NodeTag.ABSTRACT}),
    template="pub trait ${name} {${signatures}\n}",
    binder=bind_trait,
    description="ABC / Protocol -> trait",
  ),
  Rule(
    name="record_with_defaults",
    trigger=Trigger(kind=NodeKind.CLASS_DEF, require={NodeTag.DATACLASS, NodeTag.HAS_DEFAULTS}),
    template=(
      "${attributes}pub struct ${name} {${fields}\n"
      "}\n"
      "\n"
      "impl Default for ${name} {\n"
      f"{INDENT}fn default() -> Self {{\n"
      f"{INDENT * 2}Self {{${{defaults}}\n"
      f"{INDENT * 2}}}\n"
      f"{INDENT}}}\n"
      "}${impl_block}"
    ),
    binder=bind_record,
    description="Record with default values -> struct + impl Default",
  ),
  Rule(
    name="struct",
    trigger=Trigger(kind=NodeKind.CLASS_DEF, require={NodeTag.DATACLASS}),
    template="${attributes}pub struct ${name} {${fields}\n}${impl_block}",
    binder=bind_record,
    description="Immutable record -> struct",
  ),
  Rule(
    name="trait_impl",
    trigger=Trigger(kind=NodeKind.CLASS_DEF, require={NodeTag.HAS_BASES}),
    template="${attributes}pub struct ${name} {${fields}\n}\n\nimpl ${base} for ${name} {${methods}\n}",
    binder=bind_trait_impl,
    description="Inheritance -> struct implementing the base trait",
  ),
  Rule(
    name="class_struct",
    trigger=Trigger(kind=NodeKind.CLASS_DEF),
    template="${attributes}pub struct ${name} {${fields}\n}${impl_block}",
    binder=bind_record,
    description="Plain class -> struct + inherent impl",
  ),
]
