"""
embed.py

Responsibility: Render the field builder into a standalone module (plus a
conformance test) that another project can carry under its own package.

Rules:
- The module body is the verbatim source of `fieldbuilder/builder.py`; only a
  generated-file header is added, so the copy behaves exactly like the library.
- Output is deterministic for a given (prefix, module) pair.
- Nothing is written to disk here; callers decide where the text goes.
"""

from __future__ import annotations

import logging
from importlib import resources

from jinja2 import Environment, StrictUndefined

from fieldbuilder import __version__

logger = logging.getLogger(__name__)

DEFAULT_MODULE = "fields"

MODULE_TEMPLATE = "module.py.j2"
TEST_TEMPLATE = "test_module.py.j2"


class EmbedError(ValueError):
    pass


class RenderError(RuntimeError):
    pass


def _validate_target(prefix: str, module: str) -> None:
    parts = prefix.split(".") if prefix else []
    if not parts or not all(part.isidentifier() for part in parts):
        raise EmbedError(f"Prefix must be a dotted Python package path, got {prefix!r}")
    if not module.isidentifier():
        raise EmbedError(f"Module name must be a Python identifier, got {module!r}")


def _read_package_text(*path: str) -> str:
    target = resources.files("fieldbuilder")
    for part in path:
        target = target.joinpath(part)
    return target.read_text(encoding="utf-8")


def _environment() -> Environment:
    return Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def _context(prefix: str, module: str) -> dict[str, object]:
    return {
        "prefix": prefix,
        "module": module,
        "import_path": f"{prefix}.{module}",
        "default_module": DEFAULT_MODULE,
        "version": __version__,
    }


def _render(template_name: str, context: dict[str, object]) -> str:
    text = _read_package_text("templates", template_name)
    try:
        out = _environment().from_string(text).render(**context)
    except Exception as e:  # noqa: BLE001 - surface as RenderError
        raise RenderError(f"Failed rendering template: {template_name}") from e
    logger.debug("Rendered %s for %s", template_name, context["import_path"])
    return out


def render_module(prefix: str, module: str = DEFAULT_MODULE) -> str:
    """
    Return the source of a standalone field builder importable as `<prefix>.<module>`.
    """
    _validate_target(prefix, module)
    context = _context(prefix, module)
    context["source"] = _read_package_text("builder.py")
    return _render(MODULE_TEMPLATE, context)


def render_conformance_test(prefix: str, module: str = DEFAULT_MODULE) -> str:
    """
    Return a pytest module checking the embedded copy at `<prefix>.<module>`.
    """
    _validate_target(prefix, module)
    return _render(TEST_TEMPLATE, _context(prefix, module))


def render_files(prefix: str, module: str = DEFAULT_MODULE) -> dict[str, str]:
    """
    Render both outputs keyed by their path relative to the target project root.
    """
    _validate_target(prefix, module)
    package_path = prefix.replace(".", "/")
    test_name = f"test_{prefix.replace('.', '_')}_{module}.py"
    return {
        f"{package_path}/{module}.py": render_module(prefix, module),
        f"tests/{test_name}": render_conformance_test(prefix, module),
    }
