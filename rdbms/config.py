"""
Engine configuration.
"""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, field_validator

from .storage import DEFAULT_KEY


class EngineConfig(BaseModel):
    """Settings shared by the REPL and the API server."""
    data_dir: Optional[str] = "data"
    storage_key: str = DEFAULT_KEY
    log_level: str = "INFO"

    @field_validator('data_dir')
    @classmethod
    def _empty_means_memory(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator('log_level')
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'EngineConfig':
        """Build a config from RDBMS_DATA_DIR, RDBMS_STORAGE_KEY and RDBMS_LOG_LEVEL."""
        environ = os.environ if environ is None else environ
        values = {}
        for name, var in (('data_dir', 'RDBMS_DATA_DIR'),
                          ('storage_key', 'RDBMS_STORAGE_KEY'),
                          ('log_level', 'RDBMS_LOG_LEVEL')):
            if var in environ:
                values[name] = environ[var]
        return cls(**values)

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=self.log_level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
