import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from .errors import FailureKind, SchemaConflict, SchemaDefinitionError, Tier


logger = logging.getLogger(__name__)

DEFAULT_CLIENT_PREFIX = "PUBLIC_"

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}

# Plain decimal forms only: no underscores, hex, non-ASCII digits or nan/inf words
INT_RE = re.compile(r"[+-]?[0-9]+")
FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class ValueType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    URL = "url"
    ENUM = "enum"


@dataclass(frozen=True)
class Var:
    """Declarative descriptor for one configuration key.

    ``required`` defaults to True unless a default is supplied. ``rule`` is an
    optional callable run on the coerced value: returning ``None`` or ``True``
    accepts it, returning ``False`` or a message rejects it.
    """

    type: ValueType
    default: Any = None
    required: Optional[bool] = None
    description: str = ""
    secret: bool = False
    choices: Tuple[str, ...] = ()
    pattern: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    schemes: Tuple[str, ...] = ()
    rule: Optional[Callable[[Any], Any]] = None

    def __post_init__(self):
        # Accept the plain tag names ("number") as well as ValueType members
        if isinstance(self.type, str) and not isinstance(self.type, ValueType):
            try:
                object.__setattr__(self, "type", ValueType(self.type))
            except ValueError:
                pass  # unknown tags are rejected by define

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @property
    def is_required(self) -> bool:
        if self.required is not None:
            return self.required
        return not self.has_default

    @property
    def expected(self) -> str:
        if self.type is ValueType.ENUM:
            return f"enum({', '.join(self.choices)})"
        return self.type.value


def string(**options: Any) -> Var:
    return Var(ValueType.STRING, **options)


def number(**options: Any) -> Var:
    return Var(ValueType.NUMBER, **options)


def boolean(**options: Any) -> Var:
    return Var(ValueType.BOOLEAN, **options)


def url(**options: Any) -> Var:
    if "schemes" in options:
        options["schemes"] = tuple(s.lower() for s in options["schemes"])
    return Var(ValueType.URL, **options)


def enum(*choices: str, **options: Any) -> Var:
    return Var(ValueType.ENUM, choices=tuple(choices), **options)


def _parse_string(raw: str, var: Var) -> str:
    if var.pattern and not re.fullmatch(var.pattern, raw):
        raise ValueError(f"does not match pattern {var.pattern!r}")
    return raw


def _parse_number(raw: str, var: Var):
    text = raw.strip()
    if INT_RE.fullmatch(text):
        value = int(text)
    elif FLOAT_RE.fullmatch(text):
        value = float(text)
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
    else:
        raise ValueError("not a decimal number")
    if var.minimum is not None and value < var.minimum:
        raise ValueError(f"must be >= {var.minimum}")
    if var.maximum is not None and value > var.maximum:
        raise ValueError(f"must be <= {var.maximum}")
    return value


def _parse_boolean(raw: str, var: Var) -> bool:
    text = raw.strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError("expected one of true/false, 1/0, yes/no, on/off")


def _parse_url(raw: str, var: Var) -> str:
    text = raw.strip()
    parsed = urlparse(text)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError("not an absolute URL with scheme and host")
    if var.schemes and parsed.scheme.lower() not in var.schemes:
        raise ValueError(f"scheme must be one of: {', '.join(var.schemes)}")
    return text


def _parse_enum(raw: str, var: Var) -> str:
    if raw not in var.choices:
        raise ValueError(f"must be one of: {', '.join(var.choices)}")
    return raw


PARSERS: Dict[ValueType, Callable[[str, Var], Any]] = {
    ValueType.STRING: _parse_string,
    ValueType.NUMBER: _parse_number,
    ValueType.BOOLEAN: _parse_boolean,
    ValueType.URL: _parse_url,
    ValueType.ENUM: _parse_enum,
}


def coerce(var: Var, raw: str) -> Any:
    """Parse a raw string into the declared type, raising ValueError on failure."""
    value = PARSERS[var.type](raw, var)
    if var.rule is not None:
        try:
            verdict = var.rule(value)
        except ValueError:
            raise
        except Exception as e:
            raise ValueError(f"validation rule failed: {type(e).__name__}: {e}") from e
        if verdict is False:
            raise ValueError("rejected by validation rule")
        if isinstance(verdict, str):
            raise ValueError(verdict)
    return value


def _default_as_raw(var: Var) -> str:
    default = var.default
    if isinstance(default, str):
        return default
    if var.type is ValueType.BOOLEAN and isinstance(default, bool):
        return "true" if default else "false"
    if var.type is ValueType.NUMBER and isinstance(default, (int, float)) and not isinstance(default, bool):
        return repr(default)
    raise ValueError(f"default {default!r} is not a valid {var.type.value}")


@dataclass(frozen=True)
class Entry:
    key: str
    tier: Tier
    var: Var
    default: Any = None


@dataclass(frozen=True)
class Schema:
    """Immutable, tier-partitioned set of entries produced by ``define``."""

    entries: Tuple[Entry, ...]
    client_prefix: str = DEFAULT_CLIENT_PREFIX
    empty_as_missing: bool = True

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return any(entry.key == key for entry in self.entries)

    def entry(self, key: str) -> Entry:
        for candidate in self.entries:
            if candidate.key == key:
                return candidate
        raise KeyError(key)

    def tier_of(self, key: str) -> Tier:
        return self.entry(key).tier

    def keys(self, *tiers: Tier) -> Tuple[str, ...]:
        return tuple(e.key for e in self.entries if not tiers or e.tier in tiers)


def _check_descriptor(key: str, tier: Tier, var: Any, failures: List[SchemaConflict]) -> bool:
    def conflict(detail: str, kind: FailureKind = FailureKind.DESCRIPTOR) -> None:
        failures.append(SchemaConflict(key=key, tier=tier, detail=detail, kind=kind))

    if not isinstance(var, Var):
        conflict(f"descriptor must be a Var, got {type(var).__name__}")
        return False
    if not isinstance(var.type, ValueType) or var.type not in PARSERS:
        conflict(f"unsupported value type {var.type!r}")
        return False
    if var.type is ValueType.ENUM and not var.choices:
        conflict("enum requires at least one choice")
        return False
    if var.pattern is not None:
        try:
            re.compile(var.pattern)
        except re.error as e:
            conflict(f"invalid pattern {var.pattern!r}: {e}")
            return False
    if var.minimum is not None and var.maximum is not None and var.minimum > var.maximum:
        conflict(f"minimum {var.minimum} is greater than maximum {var.maximum}")
        return False
    return True


def define(
    server: Optional[Mapping[str, Var]] = None,
    shared: Optional[Mapping[str, Var]] = None,
    client: Optional[Mapping[str, Var]] = None,
    *,
    client_prefix: str = DEFAULT_CLIENT_PREFIX,
    empty_as_missing: bool = True,
) -> Schema:
    """Build a Schema from per-tier mappings of key name to ``Var``.

    Every definition problem is collected and raised together as a
    SchemaDefinitionError. No configuration values are read here.
    """
    failures: List[SchemaConflict] = []
    if not isinstance(client_prefix, str) or not client_prefix:
        failures.append(SchemaConflict(key="<client_prefix>", tier=None, detail="client prefix must be a non-empty string", kind=FailureKind.NAMING))
        # Keep checking keys so the report is complete
        client_prefix = DEFAULT_CLIENT_PREFIX

    entries: List[Entry] = []
    seen: Dict[str, Tier] = {}

    for tier, mapping in ((Tier.SERVER, server), (Tier.SHARED, shared), (Tier.CLIENT, client)):
        for key, var in (mapping or {}).items():
            if not isinstance(key, str) or not key:
                failures.append(SchemaConflict(key=repr(key), tier=tier, detail="key name must be a non-empty string", kind=FailureKind.NAMING))
                continue

            if key in seen:
                failures.append(SchemaConflict(
                    key=key,
                    tier=tier,
                    detail=f"already declared in tier {seen[key].value}",
                    kind=FailureKind.DUPLICATE,
                ))
                continue
            seen[key] = tier

            if tier is Tier.CLIENT and not key.startswith(client_prefix):
                failures.append(SchemaConflict(
                    key=key,
                    tier=tier,
                    detail=f"client-exposed keys must start with {client_prefix!r}",
                    kind=FailureKind.NAMING,
                ))
            elif tier is Tier.SERVER and key.startswith(client_prefix):
                failures.append(SchemaConflict(
                    key=key,
                    tier=tier,
                    detail=f"server-only keys must not start with the client prefix {client_prefix!r}",
                    kind=FailureKind.NAMING,
                ))

            if not _check_descriptor(key, tier, var, failures):
                continue

            default = None
            if var.has_default:
                try:
                    default = coerce(var, _default_as_raw(var))
                except ValueError as e:
                    failures.append(SchemaConflict(key=key, tier=tier, detail=f"invalid default: {e}", kind=FailureKind.DEFAULT))
                    continue

            entries.append(Entry(key=key, tier=tier, var=var, default=default))

    if failures:
        raise SchemaDefinitionError(failures)

    logger.debug(f"Defined configuration schema with {len(entries)} keys")
    return Schema(entries=tuple(entries), client_prefix=client_prefix, empty_as_missing=empty_as_missing)
