import logging
from typing import Any, Dict, List, Mapping, Optional

from .errors import ConfigFailure, ConfigValidationError, InvalidConfiguration, MissingConfiguration
from .schema import Entry, Schema, coerce
from .views import ValidatedConfig


logger = logging.getLogger(__name__)


def _lookup(entry: Entry, source: Mapping[str, Optional[str]], empty_as_missing: bool) -> Optional[str]:
    raw = source.get(entry.key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raw = str(raw)
    if empty_as_missing and raw.strip() == "":
        return None
    return raw


def validate(schema: Schema, raw_source: Mapping[str, Optional[str]]) -> ValidatedConfig:
    """Validate a raw key/value source against a schema.

    Every declared key is checked before anything is raised, so the
    resulting ConfigValidationError lists all missing and invalid values in
    declaration order. Keys not declared in the schema are ignored.
    """
    source = dict(raw_source)
    values: Dict[str, Any] = {}
    failures: List[ConfigFailure] = []

    for entry in schema:
        raw = _lookup(entry, source, schema.empty_as_missing)

        if raw is None:
            if entry.var.has_default:
                values[entry.key] = entry.default
            elif entry.var.is_required:
                failures.append(MissingConfiguration(
                    key=entry.key,
                    tier=entry.tier,
                    detail=f"required {entry.var.expected} value is not set and has no default",
                ))
            else:
                values[entry.key] = None
            continue

        try:
            values[entry.key] = coerce(entry.var, raw)
        except ValueError as e:
            failures.append(InvalidConfiguration(
                key=entry.key,
                tier=entry.tier,
                detail=str(e),
                expected=entry.var.expected,
                raw_value=raw,
                secret=entry.var.secret,
            ))

    if failures:
        raise ConfigValidationError(failures)

    declared = set(schema.keys())
    ignored = sum(1 for key in source if key not in declared)
    if ignored:
        logger.debug(f"Ignored {ignored} source keys not declared in the schema")

    return ValidatedConfig.build(schema, values)
