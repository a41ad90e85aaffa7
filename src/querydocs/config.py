"""Settings for querydocs.

Settings come from an optional ``querydocs.yml`` at the project root, with
environment variables taking precedence over the file.
"""

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from querydocs.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = 'querydocs.yml'

# Rows fetched per connection when a run does not ask for a page size
DEFAULT_ROW_LIMIT = 5
DEFAULT_PAGE_SIZE = 5

ENV_OVERRIDES = {
    'models_path': 'QUERYDOCS_MODELS_PATH',
    'docs_path': 'QUERYDOCS_DOCS_PATH',
}


@dataclass
class Settings:
    """Locations and limits shared by every run in the process."""

    models_root: Path
    docs_root: Path
    row_limit: int = DEFAULT_ROW_LIMIT
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        self.models_root = Path(self.models_root).resolve()
        self.docs_root = Path(self.docs_root).resolve()

    @property
    def models_url(self) -> str:
        """URL that relative imports in snippets resolve against."""
        return f'file://{self.models_root}/'

    def resolve_source_path(self, source_path: str) -> str:
        """Turn a models-root-relative path into an absolute ``file://`` URL."""
        return f'file://{os.path.abspath(os.path.join(self.models_root, source_path))}'

    def model_key(self, model_path: str) -> str:
        """Key a model file by its path relative to the models root."""
        return Path(os.path.relpath(model_path, self.models_root)).as_posix()

    def document_url(self, document_path: str) -> str:
        return f'file://{os.path.join(self.docs_root, document_path)}'


def load_project_config(project_root: Path) -> Dict:
    """Load querydocs.yml configuration.

    Args:
        project_root: Directory containing querydocs.yml

    Returns:
        Dictionary with project configuration, empty if there is no file

    Raises:
        ConfigError: If the config file is invalid
    """
    config_path = project_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f'Invalid YAML in {CONFIG_FILE_NAME}: {e}') from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f'{CONFIG_FILE_NAME} must contain a mapping, got {type(config).__name__}')
    return config


def load_settings(project_root: Optional[Union[str, Path]] = None) -> Settings:
    """Build settings for a project directory.

    Args:
        project_root: Project directory (default: current directory)

    Returns:
        Settings with models under ``models/`` and documents under ``src/``
        unless the config file or environment says otherwise
    """
    project_root = Path(project_root or Path.cwd()).resolve()
    config = load_project_config(project_root)

    for key, env_var in ENV_OVERRIDES.items():
        if os.getenv(env_var):
            config[key] = os.environ[env_var]
            logger.debug(f'Using {env_var} for {key}')

    try:
        row_limit = int(config.get('row_limit', DEFAULT_ROW_LIMIT))
        page_size = int(config.get('page_size', DEFAULT_PAGE_SIZE))
    except (TypeError, ValueError) as e:
        raise ConfigError(f'row_limit and page_size must be integers: {e}') from e

    return Settings(
        models_root=project_root / config.get('models_path', 'models'),
        docs_root=project_root / config.get('docs_path', 'src'),
        row_limit=row_limit,
        page_size=page_size,
    )


_settings: Optional[Settings] = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Return the process-wide settings, loading them from the current directory on first use."""
    global _settings
    with _settings_lock:
        if _settings is None:
            _settings = load_settings()
        return _settings


def configure(settings: Optional[Settings] = None) -> None:
    """Replace the process-wide settings (``None`` reloads lazily on next use)."""
    global _settings
    with _settings_lock:
        _settings = settings
