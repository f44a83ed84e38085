"""Scope-tiered configuration validation."""

from .core.errors import (  # noqa: F401
    ConfigFailure,
    ConfigurationError,
    ConfigValidationError,
    FailureKind,
    InvalidConfiguration,
    MissingConfiguration,
    SchemaConflict,
    SchemaDefinitionError,
    Tier,
)
from .core.holder import ConfigHolder  # noqa: F401
from .core.schema import Schema, ValueType, Var, boolean, define, enum, number, string, url  # noqa: F401
from .core.validation import validate  # noqa: F401
from .core.views import ConfigView, ValidatedConfig, for_client, for_full, for_server  # noqa: F401
