"""
Configuration management for Drug Label Explorer
"""

import logging
import logging.handlers
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenFDAConfig(BaseModel):
    """OpenFDA API configuration"""
    base_url: str = Field(default="https://api.fda.gov/")
    label_endpoint: str = Field(default="drug/label.json")
    api_key: Optional[str] = Field(default=None)
    timeout: int = Field(default=30, ge=1, le=300)
    max_retries: int = Field(default=3, ge=0, le=10)
    rate_limit_delay: float = Field(default=0.5, ge=0.0, le=10.0)
    user_agent: str = Field(default="Drug-Label-Explorer/1.0")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        """Validate FDA base URL format"""
        if not v:
            raise ValueError("FDA base URL cannot be empty")

        parsed = urlparse(v)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("FDA base URL must be a valid URL with scheme and domain")

        if parsed.scheme not in ["http", "https"]:
            raise ValueError("FDA base URL must use http or https protocol")

        return v.rstrip("/") + "/"  # Ensure trailing slash

    @field_validator("label_endpoint")
    @classmethod
    def validate_label_endpoint(cls, v):
        """Validate label endpoint path"""
        if not v or not v.endswith(".json"):
            raise ValueError("Label endpoint must be a .json path (e.g. drug/label.json)")
        return v.lstrip("/")

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v):
        """Validate FDA API key format"""
        if v and len(v.strip()) < 10:
            raise ValueError("FDA API key appears to be too short")
        return v

    @field_validator("user_agent")
    @classmethod
    def validate_user_agent(cls, v):
        """Validate user agent string"""
        if not v or len(v.strip()) < 5:
            raise ValueError("User agent must be a meaningful string")
        return v


class RAGConfig(BaseModel):
    """Chunking, ranking and summary settings for the label RAG pipeline"""
    source: str = Field(default="openfda")
    chunk_size: int = Field(default=1000, ge=10, le=20000)
    chunk_overlap: int = Field(default=200, ge=0, le=10000)
    default_top_k: int = Field(default=5, ge=1, le=10)
    default_fetch_limit: int = Field(default=50, ge=1, le=100)
    summary_max_length: int = Field(default=1200, ge=100, le=20000)
    chunk_preview_chars: int = Field(default=1200, ge=100, le=20000)

    @model_validator(mode="after")
    def validate_overlap(self):
        """Overlap must leave room for the cursor to advance"""
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self


class APIConfig(BaseModel):
    """API server configuration"""
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = Field(default=False)
    docs_url: str = Field(default="/docs")
    redoc_url: str = Field(default="/redoc")
    openapi_url: str = Field(default="/openapi.json")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("host")
    @classmethod
    def validate_host(cls, v):
        """Validate host address"""
        if not v:
            raise ValueError("API host cannot be empty")

        if v not in ["0.0.0.0", "127.0.0.1", "localhost"] and not re.match(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$", v):
            # Allow domain names and other valid formats
            if not re.match(r"^[a-zA-Z0-9.-]+$", v):
                raise ValueError("Host must be a valid IP address, domain name, or 'localhost'")

        return v

    @field_validator("docs_url", "redoc_url", "openapi_url")
    @classmethod
    def validate_url_paths(cls, v):
        """Validate URL paths"""
        if not v.startswith("/"):
            raise ValueError("URL paths must start with '/'")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = Field(default="INFO")
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file: Optional[str] = Field(default=None)
    max_bytes: int = Field(default=10485760, ge=1024, le=1073741824)  # 1KB to 1GB
    backup_count: int = Field(default=5, ge=0, le=50)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate logging level"""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of: {allowed_levels}")
        return v.upper()


class Config(BaseSettings):
    """Main configuration class with validation"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        validate_assignment=True,
        extra="ignore",
    )

    # Environment
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Component configurations
    openfda: OpenFDAConfig = Field(default_factory=OpenFDAConfig)
    rag: RAGConfig = Field(default_factory=RAGConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Application settings
    app_name: str = Field(default="Drug Label Explorer")
    app_version: str = Field(default="1.0.0")
    description: str = Field(default="FDA drug label search and safety summarization for LLM tool callers")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting"""
        allowed = ["development", "testing", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    def validate_startup(self, strict: bool = False) -> List[str]:
        """
        Validate configuration at startup.

        Args:
            strict: If True, report warnings as errors

        Returns:
            List of warning/error messages
        """
        issues = []

        if self.environment == "production":
            if self.debug:
                issues.append("WARNING: Debug mode should be disabled in production")
            if self.api.debug:
                issues.append("WARNING: API debug mode should be disabled in production")
            if "*" in self.api.cors_origins:
                issues.append("WARNING: CORS allows any origin in production")

        if self.logging.file:
            try:
                log_path = Path(self.logging.file)
                log_path.parent.mkdir(parents=True, exist_ok=True)
                test_file = log_path.parent / ".write_test"
                test_file.touch()
                test_file.unlink()
            except (OSError, PermissionError):
                issues.append(f"ERROR: Cannot write to log file location: {self.logging.file}")

        if self.rag.chunk_preview_chars < self.rag.chunk_size:
            issues.append("WARNING: chunk_preview_chars is smaller than chunk_size; returned chunks will be cut")

        if not self.openfda.api_key:
            issues.append("INFO: FDA API key not configured. Rate limiting may apply.")

        if strict:
            issues = [issue.replace("WARNING:", "ERROR:", 1) for issue in issues]

        return issues

    def validate_and_fail_on_errors(self) -> None:
        """Validate configuration and raise exception if critical errors found"""
        issues = self.validate_startup(strict=False)

        errors = [issue for issue in issues if issue.startswith("ERROR") or issue.startswith("CRITICAL")]

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(errors)
            raise ValueError(error_msg)

    def get_validation_summary(self) -> Dict[str, List[str]]:
        """Get validation summary categorized by severity"""
        issues = self.validate_startup(strict=False)

        return {
            "critical": [issue for issue in issues if issue.startswith("CRITICAL")],
            "errors": [issue for issue in issues if issue.startswith("ERROR")],
            "warnings": [issue for issue in issues if issue.startswith("WARNING")],
            "info": [issue for issue in issues if issue.startswith("INFO")],
        }

    @classmethod
    def from_file(cls, config_path: str) -> "Config":
        """Load configuration from YAML file"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return self.model_dump()

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to YAML file"""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)


# Global configuration instance
_config: Optional[Config] = None


def get_config(validate_startup: bool = False) -> Config:
    """
    Get the global configuration instance

    Args:
        validate_startup: If True, run startup validation and fail on errors
    """
    global _config
    if _config is None:
        _config = Config()

        if validate_startup:
            _config.validate_and_fail_on_errors()

    return _config


def set_config(config: Optional[Config]) -> None:
    """Set (or reset with None) the global configuration instance"""
    global _config
    _config = config


def load_config(config_path: Optional[str] = None, validate_startup: bool = False) -> Config:
    """
    Load configuration from file or environment

    Args:
        config_path: Path to configuration file (optional)
        validate_startup: If True, run startup validation and fail on errors
    """
    if config_path:
        config = Config.from_file(config_path)
    else:
        config = Config()

    if validate_startup:
        config.validate_and_fail_on_errors()

    set_config(config)
    return config


# Default configuration paths
DEFAULT_CONFIG_PATHS = [
    "config/config.yaml",
    "config.yaml",
    os.path.expanduser("~/.drug-label-explorer/config.yaml"),
]


def auto_load_config(validate_startup: bool = False) -> Config:
    """
    Auto-load configuration from default paths

    Args:
        validate_startup: If True, run startup validation and fail on errors
    """
    for path in DEFAULT_CONFIG_PATHS:
        if os.path.exists(path):
            return load_config(path, validate_startup=validate_startup)

    return load_config(validate_startup=validate_startup)


def configure_logging(logging_config: Optional[LoggingConfig] = None) -> None:
    """Apply logging settings to the root logger."""
    logging_config = logging_config or get_config().logging

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logging_config.file:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                logging_config.file,
                maxBytes=logging_config.max_bytes,
                backupCount=logging_config.backup_count,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=logging_config.level,
        format=logging_config.format,
        handlers=handlers,
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def validate_current_config() -> Dict[str, List[str]]:
    """Validate current configuration and return summary"""
    return get_config().get_validation_summary()


def print_config_validation() -> None:
    """Print configuration validation summary to console"""
    summary = validate_current_config()

    if summary["critical"]:
        print("🚨 CRITICAL ISSUES:")
        for issue in summary["critical"]:
            print(f"  {issue}")
        print()

    if summary["errors"]:
        print("❌ ERRORS:")
        for issue in summary["errors"]:
            print(f"  {issue}")
        print()

    if summary["warnings"]:
        print("⚠️  WARNINGS:")
        for issue in summary["warnings"]:
            print(f"  {issue}")
        print()

    if summary["info"]:
        print("ℹ️  INFO:")
        for issue in summary["info"]:
            print(f"  {issue}")
        print()

    if not any(summary.values()):
        print("✅ Configuration validation passed with no issues!")


def ensure_valid_config() -> Config:
    """Ensure configuration is valid or raise exception"""
    config = get_config()
    config.validate_and_fail_on_errors()
    return config
