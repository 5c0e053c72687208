"""Engine configuration.

EngineConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Engine configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = EngineConfig(port=3000, timeout=5.0, enable_cache=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False

    # Request deadline in seconds; None disables the timeout middleware
    timeout: float | None = 30.0

    # Logging
    log_level: str = "debug"
    log_dir: str | Path | None = "logs"  # None = stdout only

    # Templates
    templates_path: str | Path | None = "templates"  # None = no renderer
    template_extension: str = ".html"
    enable_cache: bool = False
    autoescape: bool = True

    # Static files (mounted at freeze time when static_dir is set)
    static_dir: str | Path | None = None
    static_url: str = "/static"

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
