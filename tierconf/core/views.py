from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator

from .errors import Tier
from .schema import Schema


SERVER_TIERS: FrozenSet[Tier] = frozenset({Tier.SERVER, Tier.SHARED})
CLIENT_TIERS: FrozenSet[Tier] = frozenset({Tier.CLIENT, Tier.SHARED})


class ConfigView(Mapping):
    """Read-only mapping of key to typed value for one audience.

    Values are also reachable as attributes (``view.PORT``). Attribute access
    is meant for upper-case env style keys; names the mapping API already
    uses (``keys``, ``items``, ``get``, ``name``, ...) resolve to the API, so
    read such keys with ``view[key]``.
    """

    def __init__(self, name: str, values: Dict[str, Any], tiers: Dict[str, Tier], secrets: FrozenSet[str] = frozenset()):
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_data", MappingProxyType(dict(values)))
        object.__setattr__(self, "_tiers", MappingProxyType(dict(tiers)))
        object.__setattr__(self, "_secrets", frozenset(secrets))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __hash__(self) -> int:
        # Consistent with Mapping equality, which ignores the view name
        return hash(frozenset(self._data.items()))

    def __getattr__(self, key: str) -> Any:
        if key.startswith("_"):
            raise AttributeError(key)
        try:
            return self._data[key]
        except KeyError:
            raise AttributeError(f"{self._name} configuration has no key {key!r}") from None

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"{self._name} configuration is read-only")

    def __delattr__(self, key: str) -> None:
        raise AttributeError(f"{self._name} configuration is read-only")

    def __repr__(self) -> str:
        return f"ConfigView({self._name!r}, keys={list(self._data)!r})"

    @property
    def name(self) -> str:
        return self._name

    def tier_of(self, key: str) -> Tier:
        return self._tiers[key]

    def is_secret(self, key: str) -> bool:
        return key in self._secrets

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)


def _view(name: str, schema: Schema, values: Mapping, tiers: FrozenSet[Tier]) -> ConfigView:
    selected = [entry for entry in schema if entry.tier in tiers]
    return ConfigView(
        name,
        {entry.key: values[entry.key] for entry in selected},
        {entry.key: entry.tier for entry in selected},
        frozenset(entry.key for entry in selected if entry.var.secret),
    )


@dataclass(frozen=True)
class ValidatedConfig:
    """Immutable result of a successful validation pass.

    The client view is assembled from client-exposed and shared entries
    only, so a server-only key can never appear in it.
    """

    schema: Schema
    server: ConfigView
    client: ConfigView
    full: ConfigView

    @classmethod
    def build(cls, schema: Schema, values: Mapping) -> "ValidatedConfig":
        return cls(
            schema=schema,
            server=_view("server", schema, values, SERVER_TIERS),
            client=_view("client", schema, values, CLIENT_TIERS),
            full=_view("full", schema, values, frozenset(Tier)),
        )


def for_server(config: ValidatedConfig) -> ConfigView:
    return config.server


def for_client(config: ValidatedConfig) -> ConfigView:
    return config.client


def for_full(config: ValidatedConfig) -> ConfigView:
    return config.full
