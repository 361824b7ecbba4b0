"""Tunable heuristics for the table reconstruction engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields


ENV_PREFIX = "BSP_"

_TRUE = {"1", "true", "t", "yes", "y", "on"}
_FALSE = {"0", "false", "f", "no", "n", "off"}


def _coerce(key: str, raw: str, default):
  if isinstance(default, bool):
    if raw.lower() in _TRUE | _FALSE:
      return raw.lower() in _TRUE
    raise ValueError(f"Environment variable {key} must be a boolean")
  kind = type(default)
  if kind is str:
    return raw
  try:
    return kind(raw)
  except ValueError as exc:
    raise ValueError(f"Environment variable {key} must be {'an integer' if kind is int else 'a number'}") from exc


@dataclass(frozen=True)
class ParserConfig:
  # row clustering
  noise_floor: float = 0.5
  pitch_factor: float = 0.6
  min_row_tolerance: float = 2.0
  max_row_tolerance: float = 8.0

  # header detection
  header_scan_rows: int = 40
  header_threshold: int = 3
  data_penalty: int = 8
  header_merge_gap: float = 5.0

  # data-driven column fallback
  fallback_sample_rows: int = 15
  fallback_cluster_gap: float = 15.0
  fallback_min_support: float = 0.35

  # column boundary refinement
  boundary_sample_rows: int = 20
  boundary_min_gap: float = 25.0

  # assembly
  max_continuation_rows: int = 8
  infer_direction: bool = False
  normalize_headers: bool = False

  log_level: str = "INFO"

  def validate(self) -> "ParserConfig":
    if self.min_row_tolerance > self.max_row_tolerance:
      raise ValueError("min_row_tolerance must not exceed max_row_tolerance")
    for name in ("header_scan_rows", "fallback_sample_rows", "boundary_sample_rows", "max_continuation_rows"):
      if getattr(self, name) <= 0:
        raise ValueError(f"{name} must be positive")
    if not 0 < self.fallback_min_support <= 1:
      raise ValueError("fallback_min_support must be in (0, 1]")
    if self.pitch_factor <= 0:
      raise ValueError("pitch_factor must be positive")
    return self


def load_config() -> ParserConfig:
  """Build a ``ParserConfig`` from ``BSP_*`` environment variables; blank values keep the default."""
  defaults = ParserConfig()
  values = {}
  for f in fields(ParserConfig):
    key = ENV_PREFIX + f.name.upper()
    default = getattr(defaults, f.name)
    raw = (os.environ.get(key) or "").strip()
    values[f.name] = _coerce(key, raw, default) if raw else default
  values["log_level"] = values["log_level"].upper()
  return ParserConfig(**values).validate()
