"""
Enumerations for py2rs.

This module defines the closed vocabularies shared by ingestion, the catalog
and the matcher: node kinds, capability tags, condition operators and the
fallback policies applied to unmatched nodes.
"""

from enum import Enum


class NodeKind(str, Enum):
  """
  Structural shape of an ingested source construct.

  Every `SourceNode` carries exactly one kind. Triggers filter on it first.
  """

  CLASS_DEF = "class_def"
  FUNCTION_DEF = "function_def"
  RAISE = "raise"
  COMPREHENSION = "comprehension"
  ANNOTATED_ASSIGN = "annotated_assign"
  UNSUPPORTED = "unsupported"  # Never matched by the standard rules


class NodeTag(str, Enum):
  """
  Capability tags attached to a node at ingestion time.

  Predicates test these tags directly instead of inspecting runtime types.
  """

  DATACLASS = "dataclass"
  HAS_BASES = "has_bases"
  HAS_DEFAULTS = "has_defaults"
  HAS_OPTIONAL_FIELDS = "has_optional_fields"
  ENUM_BASE = "enum_base"
  EXCEPTION_BASE = "exception_base"
  ABSTRACT = "abstract"
  HAS_METHODS = "has_methods"
  METHOD = "method"  # Function whose first parameter is `self`
  RAISES = "raises"
  HAS_MESSAGE = "has_message"
  FILTERED = "filtered"
  OPTIONAL = "optional"
  LIST_COMP = "list_comp"
  SET_COMP = "set_comp"
  DICT_COMP = "dict_comp"
  GENERATOR = "generator"


class LogicOp(str, Enum):
  """
  Supported operators for declarative trigger conditions over captures.
  """

  EQ = "eq"  # ==
  NEQ = "neq"  # !=
  GT = "gt"  # >
  LT = "lt"  # <
  GTE = "gte"  # >=
  LTE = "lte"  # <=
  IN = "in"  # value in [list]
  NOT_IN = "not_in"  # value not in [list]
  IS_TYPE = "is_type"  # Checks the python type name of the capture (str, tuple, etc)


class FallbackPolicy(str, Enum):
  """
  What the engine does with a statement no rule matches.
  """

  PASSTHROUGH = "passthrough"  # Keep the source, wrapped in escape hatch comments
  SKIP = "skip"  # Drop the statement from the output
  FAIL = "fail"  # Fail the whole fragment
