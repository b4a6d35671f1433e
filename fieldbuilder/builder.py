"""
builder.py

Responsibility: Generate accessors, key constants and a constructor for
dict-backed object classes.

For every declared field `foo` the class receives:
- `FOO`: class-level constant holding the storage key ("FOO")
- `foo()`: getter returning the stored value (or None when unset)
- `set_foo(value)`: setter; behaviour depends on the field mode

Field specs are plain strings. A leading `-` makes the field read-only, a
leading `^` keeps the setter working but issues a deprecation warning.

Instances are `dict` subclasses keyed by the uppercased field names, so code
holding a constant can also access the storage directly: `obj[Widget.FOO]`.

Generation happens once, when the class is declared. This module depends on
the standard library only, so its source can be embedded into other projects.
"""

from __future__ import annotations

import enum
import keyword
import logging
import sys
import warnings
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

__all__ = [
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

READ_ONLY_SIGIL = "-"
DEPRECATED_SIGIL = "^"
INIT_HOOK = "init"

_TABLE_ATTR = "_field_table"


class FieldError(RuntimeError):
    pass


class FieldSpecError(FieldError, ValueError):
    pass


class DuplicateFieldError(FieldError):
    def __init__(self, field: str, owner: str, accessor: str | None = None) -> None:
        if accessor is None:
            message = f"Field {field!r} is already declared by {owner}"
        else:
            message = f"Field {field!r} would redefine {accessor}() generated for {owner}"
        super().__init__(message)
        self.field = field
        self.owner = owner
        self.accessor = accessor


class ImmutableFieldError(FieldError, AttributeError):
    def __init__(self, field: str, owner: str) -> None:
        super().__init__(f"Field {field!r} of {owner} is read-only")
        self.field = field
        self.owner = owner


class DeprecatedFieldWarning(DeprecationWarning):
    """
    Issued once per call to a deprecated setter.

    Whether each notice is shown is up to the caller's warning filters: the
    default filters hide DeprecationWarning outside `__main__` and report a
    repeated warning only once per call site.
    """


class FieldMode(enum.Enum):
    NORMAL = "normal"
    READ_ONLY = "read-only"
    DEPRECATED = "deprecated"


_SIGILS = {
    READ_ONLY_SIGIL: FieldMode.READ_ONLY,
    DEPRECATED_SIGIL: FieldMode.DEPRECATED,
}


def storage_key(name: Any) -> str:
    """Return the key a field (or any constructor argument name) is stored under."""
    return str(name).upper()


@dataclass(frozen=True)
class FieldSpec:
    """A parsed field declaration and the class that declared it."""

    name: str
    mode: FieldMode = FieldMode.NORMAL
    owner: str = ""

    @property
    def key(self) -> str:
        return storage_key(self.name)

    @property
    def attr(self) -> str:
        return self.name.lower()

    @property
    def setter_name(self) -> str:
        return f"set_{self.attr}"


def parse_field_spec(spec: str, *, owner: str = "") -> FieldSpec:
    """
    Parse one field spec string (`"name"`, `"-name"` or `"^name"`).

    The bare name must be a Python identifier with at least one letter, so
    that the constant (`NAME`) and the getter (`name`) never share a name.
    """
    if not isinstance(spec, str):
        raise FieldSpecError(f"Field spec must be a string, got {type(spec).__name__}")

    raw = spec.strip()
    mode = _SIGILS.get(raw[:1], FieldMode.NORMAL)
    name = raw[1:] if mode is not FieldMode.NORMAL else raw

    if not name.isidentifier() or keyword.iskeyword(name.lower()):
        raise FieldSpecError(f"Invalid field name in spec {spec!r}")
    if name.startswith("__") and name.endswith("__"):
        raise FieldSpecError(f"Field name {name!r} would shadow a special method")
    if name.upper() == name.lower():
        raise FieldSpecError(f"Field name {name!r} needs at least one letter")
    if hasattr(dict, name.lower()):
        raise FieldSpecError(f"Field name {name!r} would shadow dict.{name.lower()}")
    if name.lower() == INIT_HOOK:
        raise FieldSpecError(f"Field name {name!r} is reserved for the init hook")
    if name.lower() == _TABLE_ATTR:
        raise FieldSpecError(f"Field name {name!r} is reserved for the field table")
    return FieldSpec(name=name, mode=mode, owner=owner)


def _iter_specs(field_specs: str | Iterable[str]) -> list[str]:
    # A single string is a whitespace-separated list, as with namedtuple.
    if isinstance(field_specs, str):
        return field_specs.split()
    return list(field_specs)


def _field_table(cls: type) -> dict[str, FieldSpec] | None:
    return getattr(cls, _TABLE_ATTR, None)


def _is_declared(cls: type) -> bool:
    return isinstance(cls, type) and _field_table(cls) is not None


def _check_parent(cls: type, parent: type | None) -> None:
    if parent is None:
        return
    if not _is_declared(parent):
        raise TypeError(f"Parent {parent.__name__} has no declared fields")
    if parent is cls or not issubclass(cls, parent):
        raise TypeError(f"{cls.__name__} must derive from its parent {parent.__name__}")


def _inherited_table(cls: type) -> dict[str, FieldSpec]:
    """
    Find the single declared base of `cls` and return its flattened table.

    Bases that were never declared (plain mixins) are ignored.
    """
    declared = [base for base in cls.__bases__ if _is_declared(base)]
    if len(declared) > 1:
        names = ", ".join(base.__name__ for base in declared)
        raise TypeError(f"{cls.__name__} may only extend one declared class, got: {names}")

    if not declared:
        return {}
    return dict(_field_table(declared[0]) or {})


def _accessor_owners(table: Mapping[str, FieldSpec]) -> dict[str, FieldSpec]:
    """Map every generated getter and setter name to the field it belongs to."""
    owners: dict[str, FieldSpec] = {}
    for field in table.values():
        owners[field.attr] = field
        owners[field.setter_name] = field
    return owners


def _has_constructor(cls: type) -> bool:
    for klass in cls.__mro__:
        if klass is dict or klass is object:
            continue
        if "__init__" in vars(klass):
            return True
    return False


def _pairs(args: tuple[Any, ...]) -> list[tuple[Any, Any]]:
    """
    Normalize constructor positional arguments into (name, value) pairs.

    Accepts a flat even-length sequence (`"foo", 1, "bar", 2`) or a single
    mapping / iterable of pairs.
    """
    if len(args) == 1:
        source = args[0]
        if isinstance(source, Mapping):
            return list(source.items())
        out: list[tuple[Any, Any]] = []
        for item in source:
            pair = tuple(item)
            if len(pair) != 2:
                raise TypeError(f"Expected a (name, value) pair, got {item!r}")
            out.append(pair)
        return out

    if len(args) % 2:
        raise TypeError(f"Expected name/value pairs, got an odd number of arguments ({len(args)})")
    return list(zip(args[0::2], args[1::2]))


def _make_constructor(cls: type) -> Callable[..., None]:
    def __init__(self, /, *args: Any, **kwargs: Any) -> None:
        # Values go straight into storage: setters (and read-only checks) are bypassed.
        for name, value in _pairs(args):
            dict.__setitem__(self, storage_key(name), value)
        for name, value in kwargs.items():
            dict.__setitem__(self, storage_key(name), value)

        hook = getattr(self, INIT_HOOK, None)
        if callable(hook):
            hook()

    __init__.__doc__ = f"Create a {cls.__name__} from name/value pairs, then run `init()` if defined."
    return __init__


def _make_getter(field: FieldSpec) -> Callable[[Any], Any]:
    key = field.key

    def getter(self: Any) -> Any:
        return dict.get(self, key)

    getter.__doc__ = f"Return the value of field {field.name!r}."
    return getter


def _make_setter(field: FieldSpec) -> Callable[[Any, Any], Any]:
    key = field.key

    if field.mode is FieldMode.READ_ONLY:

        def setter(self: Any, value: Any) -> Any:
            raise ImmutableFieldError(field.name, field.owner)

        setter.__doc__ = f"Always fails: field {field.name!r} is read-only."
        return setter

    if field.mode is FieldMode.DEPRECATED:

        def setter(self: Any, value: Any) -> Any:
            warnings.warn(
                f"Setting field {field.name!r} of {field.owner} is deprecated",
                DeprecatedFieldWarning,
                stacklevel=2,
            )
            self[key] = value
            return value

        setter.__doc__ = f"Set field {field.name!r} (deprecated) and return the value."
        return setter

    def setter(self: Any, value: Any) -> Any:
        self[key] = value
        return value

    setter.__doc__ = f"Set field {field.name!r} and return the value."
    return setter


def _install(cls: type, name: str, func: Callable[..., Any]) -> bool:
    """Bind `func` on `cls` unless the class body already defines `name`."""
    if name in vars(cls):
        logger.debug("Keeping %s.%s defined by the class body", cls.__qualname__, name)
        return False
    func.__name__ = name
    func.__qualname__ = f"{cls.__qualname__}.{name}"
    func.__module__ = cls.__module__
    setattr(cls, name, func)
    return True


def declare(cls: type, field_specs: str | Iterable[str], parent: type | None = None) -> type:
    """
    Generate constants, accessors and (if missing) a constructor on `cls`.

    `cls` must be a dict subclass. Fields of its declared base class are
    inherited. When `parent` is given it must be that base. Every spec is
    validated before anything is installed, so a failing declaration leaves
    the class untouched.
    """
    if not (isinstance(cls, type) and issubclass(cls, dict)):
        raise TypeError(f"Declared classes must derive from dict, got {cls!r}")

    _check_parent(cls, parent)
    table = vars(cls).get(_TABLE_ATTR)
    table = dict(table) if table is not None else _inherited_table(cls)
    accessors = _accessor_owners(table)

    owner = cls.__qualname__
    new_fields: list[FieldSpec] = []
    for spec in _iter_specs(field_specs):
        field = parse_field_spec(spec, owner=owner)
        existing = table.get(field.key)
        if existing is not None:
            raise DuplicateFieldError(field.name, existing.owner)
        # `foo` and `set_foo` would both want the name `set_foo`.
        for name in (field.attr, field.setter_name):
            if name in accessors:
                raise DuplicateFieldError(field.name, accessors[name].owner, accessor=name)
        table[field.key] = field
        accessors[field.attr] = field
        accessors[field.setter_name] = field
        new_fields.append(field)

    # Constants always hold their key, inherited ones included.
    for key in table:
        setattr(cls, key, key)
    for field in new_fields:
        _install(cls, field.attr, _make_getter(field))
        _install(cls, field.setter_name, _make_setter(field))

    if _has_constructor(cls):
        logger.debug("%s already has a constructor; not generating one", owner)
    else:
        _install(cls, "__init__", _make_constructor(cls))

    setattr(cls, _TABLE_ATTR, table)
    logger.debug("Declared %s fields on %s: %s", len(new_fields), owner, [f.name for f in new_fields])
    return cls


def fields(*field_specs: str) -> Callable[[type], type]:
    """
    Class decorator form of `declare`:

        @fields("name", "-id", "^legacy")
        class User(dict):
            def init(self):
                self.setdefault(self.NAME, "anonymous")
    """

    def decorate(cls: type) -> type:
        return declare(cls, [spec for group in field_specs for spec in _iter_specs(group)])

    return decorate


def make_class(
    name: str,
    field_specs: str | Iterable[str],
    parent: type | None = None,
    *,
    namespace: Mapping[str, Any] | None = None,
    module: str | None = None,
) -> type:
    """Create a new declared class named `name`, extending `parent` (or dict)."""
    if parent is not None and not _is_declared(parent):
        raise TypeError(f"Parent {getattr(parent, '__name__', parent)!r} has no declared fields")

    base = parent if parent is not None else dict
    cls = type(name, (base,), dict(namespace or {}))

    if module is None:
        # Same approach as collections.namedtuple: attribute the class to the caller.
        try:
            module = sys._getframe(1).f_globals.get("__name__", "__main__")
        except (AttributeError, ValueError):
            module = None
    if module is not None:
        cls.__module__ = module

    return declare(cls, field_specs, parent=parent)
