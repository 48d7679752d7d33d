"""
Configuration for the formwire codec.

Defines FormSettings, a frozen dataclass carrying the knobs the walkers consult.
Defaults are sourced from formwire.core.constants (the single source of truth).

Source of truth
- formwire.core.constants.DEFAULT_TAG_NAME

Import DAG discipline
- Depends only on stdlib and formwire.core.constants.
- Walkers receive settings explicitly; nothing here is read implicitly per call.

Notes
- Precedence for FormSettings.load(): env > TOML > defaults.
- ``emit_empty_sequences`` decides how a present but empty list without
  ``omitempty`` is encoded: True emits the key with no values, False skips it.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from formwire.core.constants import DEFAULT_TAG_NAME

__all__ = ["FormSettings"]


@dataclass(frozen=True)
class FormSettings:
    """
    Runtime settings for the encode/decode walkers.

    Attributes:
        tag_name (str): Metadata key carrying the form tag on each field
            (dataclass ``metadata`` / pydantic ``json_schema_extra``).
        emit_empty_sequences (bool): Encode a present, empty, non-omitempty list as
            a key with an empty value list (True) or skip it (False).

    Examples:
        >>> from formwire.config import FormSettings
        >>> FormSettings(tag_name="query")  # doctest: +ELLIPSIS
        FormSettings(tag_name='query', ...)
    """

    tag_name: str = DEFAULT_TAG_NAME
    emit_empty_sequences: bool = True

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: FormSettings, cfg: dict[str, Any] | None) -> FormSettings:
        """Apply a loose config mapping onto FormSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        def _bool(v: Any) -> bool:
            if isinstance(v, bool):
                return v
            if isinstance(v, (int, float)):
                return bool(v)
            if isinstance(v, str):
                return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
            return False

        # tag_name (blank values keep the current name)
        if "tag_name" in cfg and isinstance(cfg["tag_name"], str) and cfg["tag_name"].strip():
            s = replace(s, tag_name=cfg["tag_name"].strip())

        # emit_empty_sequences
        if "emit_empty_sequences" in cfg:
            s = replace(s, emit_empty_sequences=_bool(cfg["emit_empty_sequences"]))

        return s

    @classmethod
    def from_env(cls, base: FormSettings | None = None, prefix: str = "FORMWIRE_") -> FormSettings:
        """
        Build FormSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - FORMWIRE_TAG_NAME
            - FORMWIRE_EMIT_EMPTY_SEQUENCES (1/0/true/false/yes/no/on/off)
        """
        s = base or cls()

        def get(name: str) -> str | None:
            return os.getenv(prefix + name)

        mapping: dict[str, Any] = {}
        v = get("TAG_NAME")
        if v:
            mapping["tag_name"] = v
        v = get("EMIT_EMPTY_SEQUENCES")
        if v:
            mapping["emit_empty_sequences"] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> FormSettings:
        """
        Build FormSettings from a TOML file.

        Search order when `path` is None:
            1) ./formwire.toml (with either a top-level [codec] table or direct keys)
            2) ./pyproject.toml under [tool.formwire]

        Returns defaults if no file is present or none of them parses.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cfg: dict[str, Any] | None = None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "formwire.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("formwire") if isinstance(tool, dict) else None
            elif isinstance(data.get("codec"), dict):
                cfg = data["codec"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> FormSettings:
        """
        Load FormSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (formwire.toml, pyproject.toml).

        Returns:
            FormSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
