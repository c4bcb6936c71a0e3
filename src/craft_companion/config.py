"""
Assistant configuration management.

This module handles loading and accessing configuration from multiple sources
with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/server.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The ServerConfig
dataclass provides typed access to all settings. Nothing in the chat pipeline
mutates it after startup.

Usage:
    from craft_companion.config import config

    print(config.game.bot_name)
    print(config.bot.command_cooldown_ms)
    print(config.build.max_extent)

Environment Variable Mapping:
    CRAFT_BOT_NAME          -> game.bot_name
    CRAFT_TRIGGER           -> game.trigger
    CRAFT_OLLAMA_URL        -> ai.ollama_base_url
    CRAFT_MODEL             -> ai.model
    CRAFT_AI_TIMEOUT        -> ai.timeout_seconds
    CRAFT_ADMIN_USERS       -> bot.admin_users
    CRAFT_COMMAND_COOLDOWN  -> bot.command_cooldown_ms
    CRAFT_DEBUG_MODE        -> bot.debug_mode
    CRAFT_MAX_BUILD_SIZE    -> build.max_extent
    CRAFT_STRUCTURES_DIR    -> structures.directory
    CRAFT_HOST              -> server.host
    CRAFT_PORT              -> server.port
    CRAFT_LOG_LEVEL         -> logging.level
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, structures/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "server.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "server.example.ini"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class GameSettings:
    """How the assistant appears inside the game."""

    bot_name: str = "AI_Admin"
    trigger: str = "@admin"


@dataclass
class AISettings:
    """Ollama connection used for the AI collaborator."""

    ollama_base_url: str = "http://localhost:11434"
    model: str = "gemma2:2b"
    timeout_seconds: float = 20.0
    temperature: float = 0.7

    @property
    def api_endpoint(self) -> str:
        """Full Ollama ``/api/chat`` URL constructed from ``ollama_base_url``."""
        return f"{self.ollama_base_url.rstrip('/')}/api/chat"


@dataclass
class BotSettings:
    """Per-player behaviour of the assistant."""

    admin_users: list[str] = field(default_factory=list)
    command_cooldown_ms: int = 500
    debug_mode: bool = False


@dataclass
class BuildSettings:
    """Limits applied to area-filling commands."""

    max_extent: int = 50


@dataclass
class CommandSettings:
    """Dispatch-time command permissions.

    The verbs the AI may propose at all are the knowledge base safe list.
    """

    admin: list[str] = field(
        default_factory=lambda: ["fill", "setblock", "structure", "gamerule", "difficulty"]
    )
    blocked: list[str] = field(
        default_factory=lambda: ["op", "deop", "ban", "kick", "stop", "restart", "whitelist"]
    )


@dataclass
class StructureSettings:
    """Where pre-built structure assets are discovered."""

    directory: str = "structures"
    extension: str = ".mcstructure"

    @property
    def absolute_path(self) -> Path:
        """Get absolute path to the structures directory."""
        p = Path(self.directory)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


@dataclass
class ServerSettings:
    """HTTP bridge binding."""

    host: str = "0.0.0.0"  # nosec B104 - intentional for server binding
    port: int = 8000


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class ServerConfig:
    """
    Complete assistant configuration.

    This is the main configuration object that aggregates all settings sections.
    Access via the module-level `config` singleton.
    """

    game: GameSettings = field(default_factory=GameSettings)
    ai: AISettings = field(default_factory=AISettings)
    bot: BotSettings = field(default_factory=BotSettings)
    build: BuildSettings = field(default_factory=BuildSettings)
    commands: CommandSettings = field(default_factory=CommandSettings)
    structures: StructureSettings = field(default_factory=StructureSettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def admin_restricted(self) -> bool:
        """True when an explicit admin list narrows who counts as admin."""
        return bool(self.bot.admin_users)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated string to list, stripping whitespace."""
    if not value or value.strip() == "":
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _load_from_ini(parser: configparser.ConfigParser, cfg: ServerConfig) -> None:
    """Load configuration from parsed INI file into ServerConfig."""
    # Game section
    if parser.has_section("game"):
        if parser.has_option("game", "bot_name"):
            cfg.game.bot_name = parser.get("game", "bot_name")
        if parser.has_option("game", "trigger"):
            cfg.game.trigger = parser.get("game", "trigger")

    # AI section
    if parser.has_section("ai"):
        if parser.has_option("ai", "ollama_base_url"):
            cfg.ai.ollama_base_url = parser.get("ai", "ollama_base_url")
        if parser.has_option("ai", "model"):
            cfg.ai.model = parser.get("ai", "model")
        if parser.has_option("ai", "timeout_seconds"):
            cfg.ai.timeout_seconds = parser.getfloat("ai", "timeout_seconds")
        if parser.has_option("ai", "temperature"):
            cfg.ai.temperature = parser.getfloat("ai", "temperature")

    # Bot section
    if parser.has_section("bot"):
        if parser.has_option("bot", "admin_users"):
            cfg.bot.admin_users = _parse_list(parser.get("bot", "admin_users"))
        if parser.has_option("bot", "command_cooldown_ms"):
            cfg.bot.command_cooldown_ms = parser.getint("bot", "command_cooldown_ms")
        if parser.has_option("bot", "debug_mode"):
            cfg.bot.debug_mode = _parse_bool(parser.get("bot", "debug_mode"))

    # Build section
    if parser.has_section("build"):
        if parser.has_option("build", "max_extent"):
            cfg.build.max_extent = parser.getint("build", "max_extent")

    # Commands section
    if parser.has_section("commands"):
        if parser.has_option("commands", "admin"):
            cfg.commands.admin = _parse_list(parser.get("commands", "admin"))
        if parser.has_option("commands", "blocked"):
            cfg.commands.blocked = _parse_list(parser.get("commands", "blocked"))

    # Structures section
    if parser.has_section("structures"):
        if parser.has_option("structures", "directory"):
            cfg.structures.directory = parser.get("structures", "directory")
        if parser.has_option("structures", "extension"):
            cfg.structures.extension = parser.get("structures", "extension")

    # Server section
    if parser.has_section("server"):
        if parser.has_option("server", "host"):
            cfg.server.host = parser.get("server", "host")
        if parser.has_option("server", "port"):
            cfg.server.port = parser.getint("server", "port")

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: ServerConfig) -> None:
    """Apply environment variable overrides to configuration."""
    # Game settings
    if env_bot_name := os.getenv("CRAFT_BOT_NAME"):
        cfg.game.bot_name = env_bot_name
    if env_trigger := os.getenv("CRAFT_TRIGGER"):
        cfg.game.trigger = env_trigger

    # AI settings
    if env_url := os.getenv("CRAFT_OLLAMA_URL"):
        cfg.ai.ollama_base_url = env_url
    if env_model := os.getenv("CRAFT_MODEL"):
        cfg.ai.model = env_model
    if env_timeout := os.getenv("CRAFT_AI_TIMEOUT"):
        cfg.ai.timeout_seconds = float(env_timeout)

    # Bot settings
    if (env_admins := os.getenv("CRAFT_ADMIN_USERS")) is not None:
        cfg.bot.admin_users = _parse_list(env_admins)
    if env_cooldown := os.getenv("CRAFT_COMMAND_COOLDOWN"):
        cfg.bot.command_cooldown_ms = int(env_cooldown)
    if env_debug := os.getenv("CRAFT_DEBUG_MODE"):
        cfg.bot.debug_mode = _parse_bool(env_debug)

    # Build settings
    if env_build := os.getenv("CRAFT_MAX_BUILD_SIZE"):
        cfg.build.max_extent = int(env_build)

    # Structure settings
    if env_structures := os.getenv("CRAFT_STRUCTURES_DIR"):
        cfg.structures.directory = env_structures

    # Server settings
    if env_host := os.getenv("CRAFT_HOST"):
        cfg.server.host = env_host
    if env_port := os.getenv("CRAFT_PORT"):
        cfg.server.port = int(env_port)

    # Logging settings
    if env_log := os.getenv("CRAFT_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()


def load_config() -> ServerConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/server.ini
        3. config/server.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        ServerConfig: Fully populated configuration object.
    """
    cfg = ServerConfig()

    # Determine which config file to use
    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        # Use example as fallback for development
        config_file = CONFIG_EXAMPLE

    # Load from INI file if available
    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    # Apply environment variable overrides (highest priority)
    _apply_env_overrides(cfg)

    return cfg


def validate_config(cfg: ServerConfig) -> list[str]:
    """
    Report configuration values that would make the assistant misbehave.

    Returns:
        One message per invalid value; an empty list means the config is usable.
    """
    errors = []
    if not cfg.ai.model.strip():
        errors.append("ai.model must not be empty")
    if cfg.ai.timeout_seconds <= 0:
        errors.append("ai.timeout_seconds must be positive")
    if not cfg.game.bot_name.strip():
        errors.append("game.bot_name must not be empty")
    if not cfg.game.trigger.strip():
        errors.append("game.trigger must not be empty")
    if cfg.bot.command_cooldown_ms < 0:
        errors.append("bot.command_cooldown_ms must not be negative")
    if cfg.build.max_extent < 1:
        errors.append("build.max_extent must be at least 1")
    if not 1 <= cfg.server.port <= 65535:
        errors.append("server.port must be a valid port number (1-65535)")
    return errors


def reload_config() -> "ServerConfig":
    """
    Reload configuration from disk and environment.

    This updates the module-level `config` singleton. Pipelines that were
    already built keep the settings they were constructed with.

    Returns:
        ServerConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

# Load configuration once at module import time
config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information,
    useful for debugging and the HTTP health endpoint.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "admin_restricted": config.admin_restricted,
        "admin_users_count": len(config.bot.admin_users),
        "debug_mode": config.bot.debug_mode,
    }


def print_config_summary() -> None:
    """Print a summary of current configuration to stdout."""
    status = get_config_status()
    print("\n" + "=" * 60)
    print("CRAFT COMPANION CONFIGURATION")
    print("=" * 60)
    print(f"Config file: {status['config_file_path']}")
    print(f"File exists: {status['config_file_exists']}")
    if status["using_example"]:
        print("WARNING: Using example config (copy to server.ini for production)")
    print("-" * 60)
    print(f"Bot name:    {config.game.bot_name} (trigger {config.game.trigger})")
    print(f"AI model:    {config.ai.model} @ {config.ai.ollama_base_url}")
    if config.admin_restricted:
        print(f"Admins:      {', '.join(config.bot.admin_users)}")
    else:
        print("Admins:      all users (no admin list configured)")
    print(f"Cooldown:    {config.bot.command_cooldown_ms} ms")
    print(f"Build limit: {config.build.max_extent} blocks per axis")
    print(f"Structures:  {config.structures.absolute_path}")
    print(f"Log level:   {config.logging.level}")
    print("=" * 60 + "\n")
