import yaml
from pathlib import Path
import os
from typing import Any, Dict, Optional
import logging
import re
import copy

DEFAULT_CONFIG: Dict[str, Any] = {
    "api": {
        "host": "0.0.0.0",
        "port": 4000,
        "cors_origins": ["*"],
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
    "storage": {
        "backend": "memory",  # memory | database
        "url": "sqlite://",  # only used by the database backend
    },
    "notifications": {
        "backend": "log",
    },
}


class Config:
    def __init__(self, config_path: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        """
        Load configuration from a YAML file.
        config_path: path to config.yaml; defaults to ./config.yaml.
        data: explicit config dict (skips the file entirely; used by tests and embedding).
        """
        logging.debug("Initializing Config class")

        if config_path:
            self.config_file = Path(config_path).resolve()
        else:
            self.config_file = Path.cwd() / "config.yaml"
        self.config_dir = self.config_file.parent

        if data is not None:
            self.data = self._merge_defaults(data)
            return

        logging.debug(f"Using config file: {self.config_file}")

        # Load environment variables from .env file
        self._load_env_file()

        self._ensure_config_exists()
        self._load_config()

    def _ensure_config_exists(self) -> None:
        """Create default config if it doesn't exist"""
        if not self.config_dir.exists():
            logging.info(f"Creating config directory: {self.config_dir}")
            self.config_dir.mkdir(parents=True)

        if not self.config_file.exists():
            logging.info(f"Creating default config file: {self.config_file}")
            self.config_file.write_text(yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False))

    def _load_env_file(self) -> None:
        """Load environment variables from .env file"""
        # Look for .env file in config directory or project root
        env_files = [
            self.config_dir / ".env",
            self.config_dir.parent / ".env",
            Path.cwd() / ".env"
        ]

        env_file = None
        for path in env_files:
            if path.exists():
                env_file = path
                break

        if not env_file:
            logging.debug("No .env file found, skipping environment variable loading")
            return

        logging.info(f"Loading environment variables from: {env_file}")
        try:
            with open(env_file, 'r') as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith('#'):
                        continue

                    match = re.match(r'^([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$', line)
                    if match:
                        key, value = match.groups()
                        value = value.strip('"').strip("'")
                        # Variables already in the environment win
                        if key not in os.environ:
                            os.environ[key] = value
                            logging.debug(f"Loaded env var: {key}")
        except OSError as e:
            logging.warning(f"Error loading .env file: {e}")

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively substitute ${VAR} / $VAR references in config data"""
        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        elif isinstance(data, str):
            if data.startswith('${') and data.endswith('}'):
                return os.environ.get(data[2:-1], data)
            elif data.startswith('$') and len(data) > 1:
                return os.environ.get(data[1:], data)
            return data
        return data

    def _merge_defaults(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill missing sections and keys from DEFAULT_CONFIG (one level deep)."""
        merged = copy.deepcopy(DEFAULT_CONFIG)
        for section, values in data.items():
            default = merged.get(section)
            if values is None:
                # "section:" with nothing under it
                continue
            if isinstance(default, dict):
                if isinstance(values, dict):
                    default.update(values)
                else:
                    logging.warning(f"Ignoring config section {section!r}: expected a mapping, got {values!r}")
            else:
                merged[section] = values
        return merged

    def _load_config(self) -> None:
        """Load configuration from file"""
        try:
            logging.debug(f"Loading config from: {self.config_file}")
            with open(self.config_file) as f:
                new_data = yaml.safe_load(f)

            if not isinstance(new_data, dict):
                raise ValueError("Invalid config format: root must be a dictionary")

            new_data = self._substitute_env_vars(new_data)
            self.data = self._merge_defaults(new_data)
            logging.debug(f"Loaded config data: {self.data}")

            log_file = self.data["logging"].get("file")
            if log_file:
                self.data["logging"]["file"] = os.path.expanduser(log_file)

        except (OSError, ValueError, yaml.YAMLError) as e:
            logging.error(f"Error loading config: {e}")
            logging.info("Using default configuration")
            self.data = copy.deepcopy(DEFAULT_CONFIG)

    def get_section(self, name: str) -> Dict[str, Any]:
        """Return one top-level section (empty dict when absent or not a mapping)."""
        section = self.data.get(name)
        return section if isinstance(section, dict) else {}
