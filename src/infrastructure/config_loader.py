import logging
from pathlib import Path
from typing import Union

import yaml
from pydantic import ValidationError

from src.domain.exceptions import ConfigurationException
from src.domain.models import ReposConfig

logger = logging.getLogger(__name__)

DEFAULT_REPOS_CONFIG = "repos.yml"


def load_repos_config(path: Union[str, Path] = DEFAULT_REPOS_CONFIG) -> ReposConfig:
    """
    Reads the YAML project list.

    Args:
        path: Location of the YAML file, relative paths resolve against the working directory.

    Returns:
        ReposConfig: The parsed orgs, repos and exclude_repos lists.

    Raises:
        ConfigurationException: If the file cannot be read or does not describe a project list.
    """
    filename = Path(path).resolve()
    try:
        raw = filename.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationException(f"Cannot read project list {filename}: {e}") from e

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise ConfigurationException(f"Malformed YAML in {filename}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationException(f"Expected a mapping at the top of {filename}, got {type(data).__name__}.")

    # "orgs:" with no items parses as None
    data = {key: value for key, value in data.items() if value is not None}

    try:
        config = ReposConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationException(f"Invalid project list in {filename}: {e}") from e

    logger.info(
        f"Loaded {filename}: {len(config.repos)} repos, {len(config.orgs)} orgs, "
        f"{len(config.exclude_repos)} excluded (ignored)."
    )
    return config
