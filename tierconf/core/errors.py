from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple


class Tier(str, Enum):
    SERVER = "server-only"
    CLIENT = "client-exposed"
    SHARED = "shared"


class FailureKind(str, Enum):
    MISSING = "missing"
    INVALID = "invalid"
    DUPLICATE = "duplicate"
    NAMING = "naming"
    DEFAULT = "default"
    DESCRIPTOR = "descriptor"


@dataclass(frozen=True)
class ConfigFailure:
    """A single problem found while defining or validating configuration."""

    key: str
    tier: Optional[Tier]
    detail: str
    kind: FailureKind

    def __str__(self) -> str:
        tier = self.tier.value if self.tier else "schema"
        return f"[{tier}] {self.key} ({self.kind.value}): {self.detail}"


@dataclass(frozen=True)
class MissingConfiguration(ConfigFailure):
    kind: FailureKind = FailureKind.MISSING


@dataclass(frozen=True)
class InvalidConfiguration(ConfigFailure):
    kind: FailureKind = FailureKind.INVALID
    expected: str = ""
    raw_value: str = ""
    secret: bool = False

    def __str__(self) -> str:
        shown = "****" if self.secret else repr(self.raw_value)
        tier = self.tier.value if self.tier else "schema"
        return f"[{tier}] {self.key} ({self.kind.value}): expected {self.expected}, got {shown}: {self.detail}"


@dataclass(frozen=True)
class SchemaConflict(ConfigFailure):
    pass


class ConfigurationError(Exception):
    """Aggregate of every failure found in one define/validate pass."""

    def __init__(self, failures: Iterable[ConfigFailure]):
        self.failures: Tuple[ConfigFailure, ...] = tuple(failures)
        super().__init__(self._summary())

    def _summary(self) -> str:
        count = len(self.failures)
        noun = "problem" if count == 1 else "problems"
        return f"{count} configuration {noun}: " + "; ".join(str(f) for f in self.failures)

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(f.key for f in self.failures)


class SchemaDefinitionError(ConfigurationError):
    pass


class ConfigValidationError(ConfigurationError):
    pass
