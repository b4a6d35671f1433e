"""
fieldbuilder package

Generates getters, setters, key constants and a constructor for dict-backed
object classes, once, at class declaration time.

Key responsibilities are split across modules:
- `builder.py`: field spec parsing and accessor/constructor generation
- `embed.py`: render `builder.py` into a standalone module for another package
- `cli.py`: CLI entrypoint (`fieldbuilder show`)
"""

from __future__ import annotations

__version__ = "0.1.0"

from fieldbuilder.builder import (  # noqa: E402
    DeprecatedFieldWarning,
    DuplicateFieldError,
    FieldError,
    FieldMode,
    FieldSpec,
    FieldSpecError,
    ImmutableFieldError,
    declare,
    fields,
    make_class,
    parse_field_spec,
    storage_key,
)

__all__ = [
    "__version__",
    "DeprecatedFieldWarning",
    "DuplicateFieldError",
    "FieldError",
    "FieldMode",
    "FieldSpec",
    "FieldSpecError",
    "ImmutableFieldError",
    "declare",
    "fields",
    "make_class",
    "parse_field_spec",
    "storage_key",
]
