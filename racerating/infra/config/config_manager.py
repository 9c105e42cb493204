"""
Configuration manager
Loads event-format profiles from YAML, resolves env_var: values and builds
RatingConfig objects.
"""

from pathlib import Path
from typing import Dict, List
import yaml
import os

from racerating.infra.config.rating_config import RatingConfig

DEFAULT_FORMAT = 'classic'
DEFAULT_RESULT_DIR = 'results'


class ConfigManager:
    """Loads the YAML config and exposes per-format rating configs"""

    def __init__(self, config_path: str):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        self._config = self._load_config()
        self._rating_configs: Dict[str, RatingConfig] = {}

    def _load_config(self) -> dict:
        """Read and parse the YAML file"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
                if not config:
                    raise ValueError("Config file is empty")
                if not isinstance(config, dict):
                    raise ValueError("Config file must contain a mapping at the top level")
                return config
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed config file: {e}")

    def _resolve_env_var(self, value: str) -> str:
        """Resolve values of the form env_var:VARIABLE_NAME"""
        if isinstance(value, str) and value.startswith("env_var:"):
            env_key = value[8:]
            env_value = os.getenv(env_key)
            if env_value is None:
                raise ValueError(f"Environment variable {env_key} is not set")
            return env_value
        return value

    def get_run_name(self) -> str:
        return self._config.get('run_name', 'racerating')

    def get_default_format(self) -> str:
        return self._resolve_env_var(self._config.get('default_format', DEFAULT_FORMAT))

    def get_format_ids(self) -> List[str]:
        return list((self._config.get('formats') or {}).keys())

    def get_format_settings(self, format_id: str) -> Dict:
        """Raw settings dict for one format"""
        formats = self._config.get('formats') or {}
        if format_id not in formats:
            raise KeyError(f"Unknown event format: {format_id}")
        return dict(formats[format_id] or {})

    def get_rating_config(self, format_id: str = None) -> RatingConfig:
        """RatingConfig for `format_id` (default format when omitted), built once"""
        if format_id is None:
            format_id = self.get_default_format()
        if format_id not in self._rating_configs:
            self._rating_configs[format_id] = RatingConfig.from_dict(
                self.get_format_settings(format_id)
            )
        return self._rating_configs[format_id]

    def get_output_settings(self) -> Dict:
        return self._config.get('output', {}) or {}

    def get_result_dir(self) -> Path:
        result_dir = self.get_output_settings().get('result_dir', DEFAULT_RESULT_DIR)
        return Path(self._resolve_env_var(result_dir))

    def validate_config(self) -> List[str]:
        """Check the config and return a list of problems (empty when valid)"""
        errors = []

        formats = self._config.get('formats')
        if not formats:
            errors.append("No event formats configured")
            return errors
        if not isinstance(formats, dict):
            errors.append("formats must be a mapping of format id to settings")
            return errors

        try:
            default_format = self.get_default_format()
        except ValueError as e:
            errors.append(str(e))
        else:
            if default_format not in formats:
                errors.append(f"default_format {default_format!r} is not a configured format")

        for format_id in formats:
            try:
                RatingConfig.from_dict(self.get_format_settings(format_id))
            except (ValueError, TypeError, KeyError) as e:
                errors.append(f"Format {format_id!r}: {e}")

        try:
            self.get_result_dir()
        except ValueError as e:
            errors.append(str(e))

        return errors
