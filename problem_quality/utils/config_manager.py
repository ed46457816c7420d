"""YAML configuration manager"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from problem_quality.utils.logger import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "PROBLEM_QUALITY_"


class ConfigManager:
    """
    Loads and serves YAML configuration.

    - dot-notation access: config.get("analysis.batch_limit")
    - environment overrides: PROBLEM_QUALITY_ANALYSIS_BATCH_LIMIT
    - every *.yaml file in the directory is merged (logging config excluded)
    """

    def __init__(self, config_dir: Optional[str] = None) -> None:
        """
        Args:
            config_dir: Directory holding the YAML files. Uses the bundled one when None.
        """
        if config_dir is None:
            config_dir = str(Path(__file__).parent.parent / "config")

        self._config_dir = config_dir
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._merged: Dict[str, Any] = {}
        self._load_all()

    def _load_all(self) -> None:
        config_path = Path(self._config_dir)
        if not config_path.exists():
            logger.warning("Config directory does not exist: %s", self._config_dir)
            return

        for yaml_file in sorted(config_path.glob("*.yaml")):
            if yaml_file.name.startswith("logging"):
                continue  # handled by setup_logging
            try:
                data = self.load(str(yaml_file))
                self._configs[yaml_file.stem] = data
                self._merged.update(data)
                logger.debug("Loaded config file: %s", yaml_file.name)
            except (OSError, yaml.YAMLError) as e:
                logger.error("Failed to load config file: %s - %s", yaml_file.name, e)

    def load(self, filepath: str) -> Dict[str, Any]:
        """
        Load a single YAML file.

        Returns:
            Parsed mapping, empty when the file is empty.
        """
        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if data is not None else {}

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Look up a value by dot-notation path.
        Environment overrides win over file values.

        Args:
            key_path: Path such as "analysis.batch_limit".
            default: Returned when the key is missing.
        """
        env_value = self._env_override(key_path)
        if env_value is not None:
            return env_value

        current = self._merged
        for key in key_path.split("."):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def get_int(self, key_path: str, default: Optional[int] = None) -> Optional[int]:
        """Integer lookup; env overrides arrive as strings. "null"/"none" mean None."""
        value = self.get(key_path, default)
        if value is None:
            return None
        if isinstance(value, str):
            if value.strip().lower() in ("", "null", "none"):
                return None
            return int(value)
        return int(value)

    def get_float(self, key_path: str, default: Optional[float] = None) -> Optional[float]:
        value = self.get(key_path, default)
        if value is None:
            return None
        if isinstance(value, str) and value.strip().lower() in ("", "null", "none"):
            return None
        return float(value)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Top-level section, or an empty dict."""
        return self._merged.get(section, {})

    def get_file_config(self, filename: str) -> Dict[str, Any]:
        """Whole contents of one file (name without extension)."""
        return self._configs.get(filename, {})

    def _env_override(self, key_path: str) -> Optional[str]:
        """"analysis.batch_limit" -> "PROBLEM_QUALITY_ANALYSIS_BATCH_LIMIT"."""
        env_key = ENV_PREFIX + key_path.upper().replace(".", "_")
        return os.environ.get(env_key)
