from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .models import BackupJob


def load_config(path: Union[str, Path]) -> BackupJob:
    """Read the YAML config at path into a validated BackupJob."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"failed to parse config {path}: expected a mapping at the top level")

    # empty sections come back as None from YAML
    data = {k: (v if v is not None else {}) for k, v in data.items()}
    try:
        return BackupJob.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}:\n{e}") from e
