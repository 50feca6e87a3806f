"""
Data structures representing the output of a translation.

A `TranslationResult` is produced whole: either the complete target text of
a fragment, or a failure carrying the offending node and the reason. There
is no partially translated state.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TranslationResult(BaseModel):
  """
  Container for the outcome of translating one fragment.
  """

  code: str = Field(default="", description="The generated Rust source. Empty on failure.")
  success: bool = Field(default=True, description="True if the fragment was translated.")
  reason: Optional[str] = Field(default=None, description="Why the translation failed.")
  node: Optional[Any] = Field(default=None, description="The SourceNode that failed, when one exists.")
  errors: List[str] = Field(default_factory=list, description="Error messages encountered.")
  warnings: List[str] = Field(default_factory=list, description="Fallbacks taken (pass-through, skipped nodes).")
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="Execution trace log data.")

  @property
  def has_errors(self) -> bool:
    return len(self.errors) > 0

  @classmethod
  def ok(
    cls,
    code: str,
    warnings: Optional[List[str]] = None,
    trace_events: Optional[List[Dict[str, Any]]] = None,
  ) -> "TranslationResult":
    return cls(code=code, warnings=warnings or [], trace_events=trace_events or [])

  @classmethod
  def failure(
    cls,
    reason: str,
    node: Any = None,
    trace_events: Optional[List[Dict[str, Any]]] = None,
  ) -> "TranslationResult":
    """
    Builds a failed result.

    Args:
        reason: Human readable failure cause.
        node: The node that could not be translated, if any.
        trace_events: Trace collected up to the failure.
    """
    return cls(
      code="",
      success=False,
      reason=reason,
      node=node,
      errors=[reason],
      trace_events=trace_events or [],
    )
