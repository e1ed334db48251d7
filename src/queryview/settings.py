import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
import logging

from omegaconf import OmegaConf, SCMode
from omegaconf.errors import OmegaConfBaseException

from queryview.exceptions import ConfigurationError
from queryview.predicates import (
    DEFAULT_ERROR_TYPE_FILTERS,
    DEFAULT_STATE_FILTERS,
    ErrorTypeFilter,
    SortOrder,
    SortType,
    StateFilter,
)

logger = logging.getLogger("queryview.settings")

DEFAULT_SETTINGS_PATH = Path("~/.config/queryview/settings.yaml")


@dataclass
class ServerSettings:
    url: str = "http://localhost:8080"
    """Base URL of the coordinator"""

    user: Optional[str] = None
    """User name sent with each request"""

    timeout: float = 10.0
    """HTTP timeout (seconds)"""


@dataclass
class ViewSettings:
    """Initial state of the query list"""

    poll_interval: float = 1.0
    """Delay between the end of a poll and the start of the next (seconds)"""

    search_debounce: float = 0.2
    """Quiet period before a search is applied (seconds)"""

    reorder_interval: float = 5.0
    """How often the list is fully re-sorted (seconds, 0 = never)"""

    max_displayed: int = 100
    """Maximum number of displayed queries (0 = all)"""

    state_filters: List[StateFilter] = field(
        default_factory=lambda: sorted(DEFAULT_STATE_FILTERS, key=lambda f: f.value)
    )
    error_type_filters: List[ErrorTypeFilter] = field(
        default_factory=lambda: sorted(
            DEFAULT_ERROR_TYPE_FILTERS, key=lambda f: f.value
        )
    )
    sort: SortType = SortType.CREATED
    sort_order: SortOrder = SortOrder.DESCENDING

    def __post_init__(self):
        for name in ("poll_interval", "search_debounce", "reorder_interval"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} should be positive or zero")
        if self.max_displayed < 0:
            raise ConfigurationError("max_displayed should be positive or zero")


@dataclass
class Settings:
    server: ServerSettings = field(default_factory=ServerSettings)
    view: ViewSettings = field(default_factory=ViewSettings)


def load_settings(path: Path) -> Settings:
    """Loads settings from a YAML file, missing values taking their defaults"""
    schema = OmegaConf.structured(Settings)
    try:
        conf = OmegaConf.merge(schema, OmegaConf.load(path))
        return OmegaConf.to_container(conf, structured_config_mode=SCMode.INSTANTIATE)
    except OmegaConfBaseException as e:
        raise ConfigurationError(f"Invalid settings in {path}: {e}") from e


@lru_cache()
def get_settings(path: Optional[Path] = None) -> Settings:
    if path is None and "PYTEST_CURRENT_TEST" in os.environ:
        return Settings()

    path = Path(path or DEFAULT_SETTINGS_PATH).expanduser()
    if not path.is_file():
        if path != DEFAULT_SETTINGS_PATH.expanduser():
            raise ConfigurationError(f"Settings file {path} does not exist")
        return Settings()

    logger.info("Reading settings from %s", path)
    return load_settings(path)
