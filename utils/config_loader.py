"""Configuration loader for the dashboard test suite."""
import os
import configparser
import json
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

import yaml

from utils.custom_exceptions import ConfigurationError


SUPPORTED_BROWSERS = ('chrome', 'firefox')


@dataclass
class DashboardConfig:
    """Where the dashboard lives and which DOM elements the steps address."""
    base_url: str = "http://localhost:8000/"
    landing_page: str = "index.html"
    home_page: str = "main.html#home"
    settings_page: str = "main.html?#settings"
    username_input_id: str = "inputUser"
    register_button_id: str = "registerBtn"
    add_entry_button_id: str = "addEntryBtn"
    save_entry_button_id: str = "saveEntryBtn"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not re.match(r'^https?://[^/\s]+', self.base_url or ''):
            raise ConfigurationError(f"Invalid dashboard base URL: {self.base_url!r}",
                                     config_key="base_url")
        if not self.base_url.endswith('/'):
            self.base_url += '/'
        for name in ('username_input_id', 'register_button_id',
                     'add_entry_button_id', 'save_entry_button_id'):
            if not getattr(self, name):
                raise ConfigurationError(f"Element id '{name}' cannot be empty", config_key=name)

    def page_url(self, page: str) -> str:
        """Absolute URL of a dashboard page."""
        return self.base_url + page.lstrip('/')

    @property
    def landing_url(self) -> str:
        return self.page_url(self.landing_page)

    @property
    def home_url(self) -> str:
        return self.page_url(self.home_page)

    @property
    def settings_url(self) -> str:
        return self.page_url(self.settings_page)


@dataclass
class BrowserConfig:
    """How the browser is launched and how long steps wait on it."""
    browser: str = "chrome"
    headless: bool = False
    window_size: Tuple[int, int] = (1280, 900)
    page_ready_timeout: float = 10.0
    poll_interval: float = 0.5
    screenshot_dir: str = "output/screenshots"
    screenshot_on_failure: bool = True
    browser_tag: str = "WithoutPlugin"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.browser = self.browser.lower()
        if self.browser not in SUPPORTED_BROWSERS:
            raise ConfigurationError(
                f"Unsupported browser: {self.browser}. Supported: {list(SUPPORTED_BROWSERS)}",
                config_key="browser")
        if self.page_ready_timeout <= 0:
            raise ConfigurationError("page_ready_timeout must be positive",
                                     config_key="page_ready_timeout")
        if self.poll_interval <= 0:
            raise ConfigurationError("poll_interval must be positive", config_key="poll_interval")
        width, height = self.window_size
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Invalid window size: {self.window_size}",
                                     config_key="window_size")
        self.browser_tag = self.browser_tag.lstrip('@')


class ConfigLoader:
    """Loads dashboard and browser settings from a config file and the environment."""

    # Environment variables that override file values: (section, key)
    ENV_OVERRIDES = {
        'KEYCLOUD_BASE_URL': ('DASHBOARD', 'base_url'),
        'KEYCLOUD_BROWSER': ('BROWSER', 'browser'),
        'KEYCLOUD_HEADLESS': ('BROWSER', 'headless'),
        'KEYCLOUD_PAGE_READY_TIMEOUT': ('BROWSER', 'page_ready_timeout'),
    }

    def __init__(self, config_dir: Optional[str] = None, config_file: str = "config.ini"):
        """
        Initialize the ConfigLoader.

        Args:
            config_dir: The directory where configuration files are located
            config_file: Config file name; .ini, .json, .yml and .yaml are supported
        """
        self.config_dir = Path(config_dir or os.getenv('KEYCLOUD_CONFIG_DIR', 'config'))
        self.config_file = config_file
        self._cache: Optional[Dict[str, Dict[str, Any]]] = None
        self._lock = threading.RLock()

        try:
            from utils.logger import get_logger
            self.logger = get_logger("config")
        except ImportError:
            import logging
            self.logger = logging.getLogger(__name__)

    def load_config_file(self, force_reload: bool = False) -> Dict[str, Dict[str, Any]]:
        """
        Load the config file into a dict of sections, applying environment overrides.

        A missing file is not an error; built-in defaults apply.
        """
        with self._lock:
            if self._cache is not None and not force_reload:
                return self._cache

            file_path = self.config_dir / self.config_file
            if file_path.exists():
                try:
                    if file_path.suffix == '.ini':
                        data = self._load_ini_config(file_path)
                    elif file_path.suffix == '.json':
                        data = self._load_json_config(file_path)
                    elif file_path.suffix in ('.yml', '.yaml'):
                        data = self._load_yaml_config(file_path)
                    else:
                        raise ConfigurationError(f"Unsupported config format: {file_path.name}",
                                                 config_file=str(file_path))
                    self._check_sections(data, file_path)
                except ConfigurationError:
                    raise
                except Exception as e:
                    raise ConfigurationError(f"Failed to load config file: {str(e)}",
                                             config_file=str(file_path))
                self.logger.debug(f"Loaded config from {file_path}")
            else:
                self.logger.info(f"Config file {file_path} not found, using defaults")
                data = {}

            self._cache = self._apply_env_overrides(data)
            return self._cache

    def _load_ini_config(self, file_path: Path) -> Dict[str, Dict[str, Any]]:
        """Load INI configuration file."""
        parser = configparser.ConfigParser(interpolation=None)
        parser.read(file_path, encoding='utf-8')

        result = {}
        for section in parser.sections():
            # DEFAULT keys such as log_level are inherited by every section
            result[section] = {key: value for key, value in parser[section].items()
                               if key not in parser.defaults()}
        return result

    def _load_json_config(self, file_path: Path) -> Dict[str, Dict[str, Any]]:
        """Load JSON configuration file."""
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f) or {}

    def _load_yaml_config(self, file_path: Path) -> Dict[str, Dict[str, Any]]:
        """Load YAML configuration file."""
        with open(file_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def _check_sections(self, data: Any, file_path: Path) -> None:
        """Every top-level entry must be a section mapping (or empty)."""
        if not isinstance(data, dict):
            raise ConfigurationError("Config file must contain named sections",
                                     config_file=str(file_path))
        for section, values in data.items():
            if values is not None and not isinstance(values, dict):
                raise ConfigurationError(f"Section '{section}' must be a mapping, got {type(values).__name__}",
                                         config_key=str(section), config_file=str(file_path))

    def _apply_env_overrides(self, data: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        result = {section: dict(values or {}) for section, values in data.items()}
        for env_var, (section, key) in self.ENV_OVERRIDES.items():
            value = os.getenv(env_var)
            if value:
                self.logger.debug(f"Overriding {section}.{key} from {env_var}")
                result.setdefault(section, {})[key] = value
        return result

    def get_dashboard_config(self, section_name: str = "DASHBOARD") -> DashboardConfig:
        """
        Get dashboard configuration.

        Args:
            section_name: Dashboard section name in config file

        Returns:
            DashboardConfig, defaults filled in for missing keys
        """
        section = self.load_config_file().get(section_name, {})
        known = DashboardConfig.__dataclass_fields__
        unknown = [key for key in section if key not in known]
        if unknown:
            self.logger.warning(f"Ignoring unknown keys in [{section_name}]: {unknown}")
        return DashboardConfig(**{key: str(value) for key, value in section.items() if key in known})

    def get_browser_config(self, section_name: str = "BROWSER") -> BrowserConfig:
        """
        Get browser configuration.

        Args:
            section_name: Browser section name in config file

        Returns:
            BrowserConfig, defaults filled in for missing keys
        """
        section = self.load_config_file().get(section_name, {})
        defaults = BrowserConfig.__dataclass_fields__

        try:
            kwargs = {}
            if 'browser' in section:
                kwargs['browser'] = str(section['browser'])
            if 'headless' in section:
                kwargs['headless'] = _to_bool(section['headless'])
            if 'window_size' in section:
                kwargs['window_size'] = _parse_window_size(section['window_size'])
            if 'page_ready_timeout' in section:
                kwargs['page_ready_timeout'] = float(section['page_ready_timeout'])
            if 'poll_interval' in section:
                kwargs['poll_interval'] = float(section['poll_interval'])
            if 'screenshot_dir' in section:
                kwargs['screenshot_dir'] = str(section['screenshot_dir'])
            if 'screenshot_on_failure' in section:
                kwargs['screenshot_on_failure'] = _to_bool(section['screenshot_on_failure'])
            if 'browser_tag' in section:
                kwargs['browser_tag'] = str(section['browser_tag'])
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid browser configuration in section '{section_name}': {str(e)}",
                                     config_key=section_name)

        unknown = [key for key in section if key not in defaults]
        if unknown:
            self.logger.warning(f"Ignoring unknown keys in [{section_name}]: {unknown}")
        return BrowserConfig(**kwargs)

    def reload_config(self) -> None:
        """Drop cached values so the next call re-reads the file."""
        with self._lock:
            self._cache = None
        self.logger.info("Configuration cache cleared")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('true', 'yes', '1', 'on'):
        return True
    if text in ('false', 'no', '0', 'off'):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_window_size(value: Any) -> Tuple[int, int]:
    if isinstance(value, (list, tuple)):
        width, height = value
    else:
        match = re.match(r'^\s*(\d+)\s*[x,]\s*(\d+)\s*$', str(value))
        if not match:
            raise ValueError(f"window_size must look like 1280x900, got {value!r}")
        width, height = match.groups()
    return int(width), int(height)


config_loader = ConfigLoader()
