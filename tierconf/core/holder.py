import logging
import threading
import time
from typing import Callable, Mapping, Optional

from .errors import ConfigurationError
from .schema import Schema
from .validation import validate
from .views import ValidatedConfig


logger = logging.getLogger(__name__)

SourceLoader = Callable[[], Mapping[str, str]]


class ConfigHolder:
    """Holds the current ValidatedConfig and swaps it on reload.

    Readers take ``holder.current`` without locking. A reload validates a
    complete new configuration first and only then replaces the reference,
    so readers see either the old or the new value, never a mix. A failed
    reload keeps the previous configuration.
    """

    def __init__(self, schema: Schema, loader: SourceLoader):
        self._schema = schema
        self._loader = loader
        self._lock = threading.Lock()
        self._current: Optional[ValidatedConfig] = None
        self._generation = 0
        self._loaded_at: Optional[float] = None

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def current(self) -> ValidatedConfig:
        config = self._current
        if config is None:
            raise RuntimeError("Configuration has not been loaded")
        return config

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def loaded_at(self) -> Optional[float]:
        return self._loaded_at

    def _swap(self) -> ValidatedConfig:
        config = validate(self._schema, self._loader())
        self._current = config
        self._generation += 1
        self._loaded_at = time.time()
        logger.info(f"Configuration loaded (generation {self._generation}, {len(self._schema)} keys)")
        return config

    def load(self) -> ValidatedConfig:
        with self._lock:
            return self._swap()

    def reload(self) -> Optional[ValidatedConfig]:
        """Rebuild and swap the configuration.

        Returns None without doing anything when another load or reload is
        still running, so overlapping triggers never wait on each other.
        """
        if not self._lock.acquire(blocking=False):
            logger.warning(f"Configuration reload already in progress, skipping (generation {self._generation})")
            return None
        try:
            return self._swap()
        except ConfigurationError as e:
            logger.error(f"Configuration reload failed, keeping generation {self._generation}: {e}")
            raise
        finally:
            self._lock.release()
