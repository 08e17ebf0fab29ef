"""
Configuration loader for the library search service.

Loads settings from config.json and provides typed access via dataclasses.
Supports singleton pattern for global access and runtime reload capability.
Secrets left empty in the file are read from the environment.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .exceptions import ConfigurationError


@dataclass
class PathsConfig:
    """Configuration for file system paths."""
    database_path: Path
    logs_directory: Path


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""
    level: str
    format: str
    max_file_size_mb: int
    backup_count: int


@dataclass
class EmbeddingConfig:
    """Configuration for the external embedding provider."""
    endpoint: str
    api_key: str
    model: str
    dimensions: int
    batch_size: int
    timeout_seconds: float
    max_retries: int


@dataclass
class SearchConfig:
    """Configuration for the hybrid book search."""
    short_query_threshold: float
    long_query_threshold: float
    short_query_max_tokens: int
    vector_limit: int
    keyword_limit: int
    keyword_only_baseline: float
    keyword_score_cap: float
    branch_timeout_seconds: float


@dataclass
class AuthConfig:
    """Configuration for bearer-token validation."""
    enabled: bool
    url: str
    anon_key: str
    timeout_seconds: float


@dataclass
class APIConfig:
    """Configuration for the HTTP service."""
    host: str
    port: int
    allowed_origins: List[str]


@dataclass
class Config:
    """
    Main configuration container holding all config sections.

    Provides singleton access via get_config() function.
    """
    paths: PathsConfig
    logging: LoggingConfig
    embedding: EmbeddingConfig
    search: SearchConfig
    auth: AuthConfig
    api: APIConfig
    project_root: Path = field(default_factory=Path)

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the config.json file.

        Returns:
            Populated Config instance.

        Raises:
            ConfigurationError: If file is missing or invalid.
        """
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                {"path": str(config_path)}
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {e}",
                {"path": str(config_path)}
            )

        project_root = config_path.parent.parent

        return cls._parse_config(data, project_root)

    @classmethod
    def _parse_config(cls, data: dict, project_root: Path) -> "Config":
        """Parse raw config dict into typed Config object."""
        paths_data = data.get("paths", {})
        paths = PathsConfig(
            database_path=cls._resolve_path(paths_data.get("database_path", "output/catalog.db"), project_root),
            logs_directory=cls._resolve_path(paths_data.get("logs_directory", "output/logs"), project_root)
        )

        log_data = data.get("logging", {})
        logging_cfg = LoggingConfig(
            level=log_data.get("level", "INFO"),
            format=log_data.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            max_file_size_mb=log_data.get("max_file_size_mb", 10),
            backup_count=log_data.get("backup_count", 5)
        )

        emb_data = data.get("embedding", {})
        embedding = EmbeddingConfig(
            endpoint=emb_data.get("endpoint", "https://api.openai.com/v1"),
            api_key=emb_data.get("api_key") or _env_first("OPENAI_API_KEY", "OPENAI_KEY"),
            model=emb_data.get("model", "text-embedding-3-small"),
            dimensions=emb_data.get("dimensions", 1536),
            batch_size=emb_data.get("batch_size", 25),
            timeout_seconds=emb_data.get("timeout_seconds", 10.0),
            max_retries=emb_data.get("max_retries", 1)
        )

        search_data = data.get("search", {})
        search = SearchConfig(
            short_query_threshold=search_data.get("short_query_threshold", 0.4),
            long_query_threshold=search_data.get("long_query_threshold", 0.5),
            short_query_max_tokens=search_data.get("short_query_max_tokens", 2),
            vector_limit=search_data.get("vector_limit", 10),
            keyword_limit=search_data.get("keyword_limit", 20),
            keyword_only_baseline=search_data.get("keyword_only_baseline", 0.5),
            keyword_score_cap=search_data.get("keyword_score_cap", 0.8),
            branch_timeout_seconds=search_data.get("branch_timeout_seconds", 15.0)
        )

        if search.short_query_threshold >= search.long_query_threshold:
            raise ConfigurationError(
                "short_query_threshold must be lower than long_query_threshold",
                {
                    "short_query_threshold": search.short_query_threshold,
                    "long_query_threshold": search.long_query_threshold
                }
            )

        auth_data = data.get("auth", {})
        auth = AuthConfig(
            enabled=auth_data.get("enabled", True),
            url=auth_data.get("url") or _env_first("SUPABASE_URL", "VITE_SUPABASE_URL"),
            anon_key=auth_data.get("anon_key") or _env_first("SUPABASE_ANON_KEY"),
            timeout_seconds=auth_data.get("timeout_seconds", 5.0)
        )

        api_data = data.get("api", {})
        api = APIConfig(
            host=api_data.get("host", "127.0.0.1"),
            port=api_data.get("port", 8000),
            allowed_origins=api_data.get("allowed_origins", ["http://localhost:5173"])
        )

        return cls(
            paths=paths,
            logging=logging_cfg,
            embedding=embedding,
            search=search,
            auth=auth,
            api=api,
            project_root=project_root
        )

    @staticmethod
    def _resolve_path(path_str: str, project_root: Path) -> Path:
        """Resolve a path string, making relative paths absolute."""
        path = Path(path_str)
        if path.is_absolute():
            return path
        return project_root / path


def _env_first(*names: str) -> str:
    """Return the first non-empty environment variable among names."""
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return ""


_config_instance: Optional[Config] = None


def get_config(config_path: Path = None) -> Config:
    """
    Get the singleton Config instance.

    Args:
        config_path: Optional path to config file. If not provided,
                    searches upward from current directory.

    Returns:
        The global Config instance.

    Raises:
        ConfigurationError: If config cannot be loaded.
    """
    global _config_instance

    if _config_instance is None or config_path is not None:
        if config_path is None:
            config_path = _find_config_file()
        _config_instance = Config.from_file(Path(config_path))

    return _config_instance


def _find_config_file() -> Path:
    """Search upward from current directory to find config/config.json."""
    env_path = os.environ.get("LIBRARY_SEARCH_CONFIG")
    if env_path:
        return Path(env_path)

    current = Path.cwd()

    for _ in range(10):
        config_path = current / "config" / "config.json"
        if config_path.exists():
            return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    raise ConfigurationError(
        "Could not find config/config.json in current directory or parents"
    )


def reload_config(config_path: Path = None) -> Config:
    """
    Force reload of configuration.

    Args:
        config_path: Optional path to config file.

    Returns:
        Fresh Config instance.
    """
    global _config_instance
    _config_instance = None
    return get_config(config_path)
