"""Configuration module for the Reminders bridge.

This module provides configuration settings using Pydantic Settings.
Environment variables can be used to override default values.
"""

import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings for the Reminders bridge.

    All settings can be overridden via environment variables.
    Example: export MCP_TRANSPORT="sse"
    """

    # MCP Server Configuration
    MCP_HOST: str = "127.0.0.1"
    """MCP server host address (network transport only)"""

    MCP_PORT: int = 8006
    """MCP server port for SSE transport"""

    MCP_TRANSPORT: str = "stdio"
    """MCP transport type: 'stdio' when spawned by an agent, 'sse' for network access"""

    # API Server Configuration
    API_HOST: str = "127.0.0.1"
    """API server host address"""

    API_PORT: int = 8005
    """API server port"""

    # Scripting backend
    OSASCRIPT_PATH: str = "osascript"
    """Executable used to run AppleScript snippets"""

    REMINDERS_APP: str = "Reminders"
    """Application name targeted by the scripting backend"""

    # Location alarm defaults
    DEFAULT_LOCATION_RADIUS: float = 100.0
    """Geofence radius in meters when set_location omits one"""

    DEFAULT_PROXIMITY: str = "enter"
    """Trigger direction when set_location omits one"""

    # Logging
    LOG_DIR: str = os.path.join(os.path.dirname(__file__), "logs")
    """Directory for rotating log files"""

    LOG_LEVEL: str = "INFO"
    """Level applied to every service logger"""

    class Config:
        """Pydantic config"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
