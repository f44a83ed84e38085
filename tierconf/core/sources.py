"""Raw source maps: untyped key/value snapshots fed to ``validate``."""

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from dotenv import dotenv_values


logger = logging.getLogger(__name__)

RawSource = Dict[str, str]


def from_environ(environ: Optional[Mapping[str, str]] = None) -> RawSource:
    """Copy of the process environment taken at call time."""
    return dict(os.environ if environ is None else environ)


def from_dotenv(path: Union[str, Path] = ".env") -> RawSource:
    env_path = Path(path)
    if not env_path.is_file():
        logger.debug(f"No env file at {env_path}, skipping")
        return {}
    values = dotenv_values(env_path)
    # Bare keys without "=" come back as None
    return {key: value for key, value in values.items() if value is not None}


def layered(*sources: Mapping[str, str]) -> RawSource:
    merged: RawSource = {}
    for source in sources:
        merged.update(source)
    return merged


def load_source(env_file: Optional[Union[str, Path]] = ".env", environ: Optional[Mapping[str, str]] = None) -> RawSource:
    """Env file values with the process environment layered on top."""
    file_values = from_dotenv(env_file) if env_file else {}
    return layered(file_values, from_environ(environ))
