"""
Runtime Configuration Store.

Holds the knobs that shape a translation run: how unmatched statements are
handled, scalar type substitutions and the derives placed on generated items.
"""

from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from py2rs.enums import FallbackPolicy


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the translation engine.
  """

  strict_mode: bool = Field(False, description="If True, an unmatched statement fails the fragment.")
  fallback: FallbackPolicy = Field(
    FallbackPolicy.PASSTHROUGH, description="Handling of statements no rule matches (non-strict mode)."
  )
  type_overrides: Dict[str, str] = Field(
    default_factory=dict, description="Scalar type substitutions applied before the builtin table."
  )
  derives: List[str] = Field(
    default_factory=lambda: ["Debug", "Clone", "PartialEq"],
    description="Traits listed in #[derive(...)] on generated structs and enums.",
  )

  @field_validator("type_overrides")
  @classmethod
  def validate_overrides(cls, v: Dict[str, str]) -> Dict[str, str]:
    """
    Rejects blank source or target names.

    Args:
        v (Dict[str, str]): Raw mapping of source type to Rust type.

    Returns:
        Dict[str, str]: The mapping with surrounding whitespace stripped.

    Raises:
        ValueError: If a key or value is empty.
    """
    cleaned = {}
    for key, val in v.items():
      k_clean, v_clean = key.strip(), val.strip()
      if not k_clean or not v_clean:
        raise ValueError(f"Invalid type override: '{key}' -> '{val}'")
      cleaned[k_clean] = v_clean
    return cleaned

  @property
  def effective_fallback(self) -> FallbackPolicy:
    """
    Resolves the fallback actually applied.

    Strict mode always wins over the configured policy.

    Returns:
        FallbackPolicy: The active policy.
    """
    return FallbackPolicy.FAIL if self.strict_mode else self.fallback

  @property
  def derive_attribute(self) -> str:
    """
    Renders the derive attribute line, or an empty string when no derives are set.

    Returns:
        str: e.g. ``#[derive(Debug, Clone)]``.
    """
    if not self.derives:
      return ""
    return f"#[derive({', '.join(self.derives)})]"

  @classmethod
  def from_settings(cls, settings: Mapping[str, Any]) -> "RuntimeConfig":
    """
    Validates a plain mapping (e.g. a host application's settings section).

    Args:
        settings (Mapping[str, Any]): Raw key/value configuration.

    Returns:
        RuntimeConfig: The validated configuration.

    Raises:
        ValueError: If validation fails.
    """
    try:
      return cls.model_validate(dict(settings))
    except ValidationError as e:
      raise ValueError(f"Configuration validation failed: {e}")
