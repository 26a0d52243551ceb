"""
Configuration loader for the IGA governance service.
Supports multiple environments and configuration validation.
"""

import json
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv


logger = logging.getLogger("iga_connectors.config")

PROJECT_ROOT = Path(__file__).parent.parent.parent


class ConfigLoader:
    """Loads and validates configuration from JSON files."""

    REQUIRED_SECTIONS = ("async_config", "database", "governance", "environment")

    def __init__(self, config_file: str = "configs/config.json", environment: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_file: Path to configuration file, absolute or relative to IGA_HOME,
                the working directory or the source checkout (first match wins)
            environment: Environment name ("local", "dev", "prod")
        """
        self.config_file = config_file
        self.config: Dict[str, Any] = {}
        self.environment = environment or "local"
        self.base_path = self._resolve_base_path(config_file)
        self._load_environment_config()
        self._load_config()
        self._validate_config()

    @staticmethod
    def _resolve_base_path(config_file: str) -> Path:
        """Directory that holds configs/ and envs/ for this run."""
        candidates = [Path.cwd(), PROJECT_ROOT]
        if os.getenv("IGA_HOME"):
            candidates.insert(0, Path(os.environ["IGA_HOME"]))
        for candidate in candidates:
            if (candidate / config_file).exists():
                return candidate
        return PROJECT_ROOT

    def _load_environment_config(self):
        """Load environment-specific configuration"""
        # First load the main .env file to get IGA_ENVIRONMENT
        main_env_path = self.base_path / 'envs' / '.env'
        if main_env_path.exists():
            load_dotenv(main_env_path, override=False)
            logger.debug("[OK] Loaded main env config from %s", main_env_path)

            env_from_file = os.getenv('IGA_ENVIRONMENT')
            if env_from_file:
                self.environment = env_from_file

        # Then load the environment-specific file
        env_file_path = self.base_path / 'envs' / f'.env.{self.environment}'
        if env_file_path.exists():
            load_dotenv(env_file_path, override=True)
            logger.debug("[OK] Loaded %s specific config from %s", self.environment, env_file_path)

    def _load_config(self):
        """Load configuration from JSON file."""
        config_path = self.base_path / self.config_file
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                self.config = json.load(f)
            logger.debug("Loaded configuration from: %s", config_path)
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file {config_path} not found")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")

    def _validate_config(self):
        """Validate required configuration sections."""
        for section in self.REQUIRED_SECTIONS:
            if section not in self.config:
                raise ValueError(f"Missing required configuration section: {section}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path (e.g., "async_config.concurrency.max_concurrent_api_calls")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def get_database_url(self) -> str:
        """Database URL, with IGA_DATABASE_URL taking precedence over the file."""
        return os.getenv("IGA_DATABASE_URL") or self.get("database.url", "sqlite+aiosqlite:///iga.db")

    def is_debug_mode(self) -> bool:
        """Check if debug mode is enabled."""
        return self.get("environment.debug", False)

    def get_rate_limit(self) -> int:
        """Get rate limit from async config."""
        return self.get("async_config.rate_limiting.rate_limit_per_minute", 50)

    def setup_logging(self):
        """Setup logging based on configuration."""
        log_level = os.getenv("IGA_LOG_LEVEL") or self.get("environment.log_level", "INFO")
        debug = self.is_debug_mode()

        level = getattr(logging, log_level.upper(), logging.INFO)

        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s" if debug else "%(levelname)s - %(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            handlers=[logging.StreamHandler()]
        )

        if debug:
            logger.debug("Debug mode enabled")
            logger.debug("Rate limit: %s req/min", self.get_rate_limit())

    def summary(self) -> str:
        """Configuration summary, safe to print."""
        lines = [
            "Configuration Summary:",
            f"  Environment: {self.get('environment.name', self.environment)}",
            f"  Database: {self.get_database_url().split('://')[0]}",
            f"  Rate Limit: {self.get_rate_limit()} req/min",
            f"  Debug Mode: {'enabled' if self.is_debug_mode() else 'disabled'}",
            "  Note: integration credentials are read from the system_settings table",
        ]
        return "\n".join(lines)

