"""
Configuration management for Random Album
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class MusicConfig:
    """Configuration for music library settings."""

    library_paths: List[str] = field(
        default_factory=lambda: [str(Path.home() / "Music")]
    )
    supported_formats: List[str] = field(
        default_factory=lambda: [".mp3", ".m4a", ".flac", ".ogg", ".opus"]
    )
    scan_recursive: bool = True


@dataclass
class PlayerConfig:
    """Configuration for the mpv player."""

    mpv_socket_path: Optional[str] = None
    volume: int = 50


@dataclass
class RandomAlbumConfig:
    """Timing knobs for the playback sequencer."""

    debounce_ms: int = 100  # Delay before re-checking the queue after a boundary
    stop_check_window_ms: int = 10000  # Remaining time at which stop-after-current is sampled

    def validate(self) -> None:
        """Validate timing values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.debounce_ms < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {self.debounce_ms}")
        if self.stop_check_window_ms <= 0:
            raise ValueError(
                f"stop_check_window_ms must be > 0, got {self.stop_check_window_ms}"
            )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = (
        None  # Custom log file path (default: ~/.local/share/random-album/random-album.log)
    )
    console_output: bool = False  # Also output to stderr (for debugging)


@dataclass
class Config:
    """Main configuration object."""

    music: MusicConfig = field(default_factory=MusicConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    random_album: RandomAlbumConfig = field(default_factory=RandomAlbumConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "random-album"
    return Path.home() / ".config" / "random-album"


def _find_project_config() -> Optional[Path]:
    """Find config.toml in project root by looking for pyproject.toml.

    Returns:
        Path to config.toml in project root, or None if not found
    """
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            config_path = parent / "config.toml"
            if config_path.exists():
                return config_path
            return None
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/random-album (or ~/.config/random-album)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "random-album"
    return Path.home() / ".local" / "share" / "random-album"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Random Album Configuration

[music]
# Paths to scan for music files
library_paths = ["~/Music"]

# Supported audio file formats
supported_formats = [".mp3", ".m4a", ".flac", ".ogg", ".opus"]

# Recursively scan subdirectories
scan_recursive = true

[player]
# Path for mpv socket (defaults to a file in the temp directory)
# mpv_socket_path = "/tmp/random-album-mpv.sock"

# Default volume (0-100)
volume = 50

[random_album]
# Milliseconds to wait after a track boundary before re-reading the queue
debounce_ms = 100

# Remaining playback (ms) at which "stop after current" is sampled
stop_check_window_ms = 10000

[logging]
# Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL
level = "INFO"

# Custom log file path (optional)
# log_file = "~/random-album.log"

# Also print logs to stderr
console_output = false
"""


def _parse_config(toml_data: dict) -> Config:
    config = Config()

    if "music" in toml_data:
        music_data = toml_data["music"]
        config.music = MusicConfig(
            library_paths=[
                str(Path(p).expanduser())
                for p in music_data.get("library_paths", config.music.library_paths)
            ],
            supported_formats=[
                ext.lower()
                for ext in music_data.get(
                    "supported_formats", config.music.supported_formats
                )
            ],
            scan_recursive=music_data.get(
                "scan_recursive", config.music.scan_recursive
            ),
        )

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            mpv_socket_path=player_data.get("mpv_socket_path"),
            volume=player_data.get("volume", config.player.volume),
        )

    if "random_album" in toml_data:
        ra_data = toml_data["random_album"]
        config.random_album = RandomAlbumConfig(
            debounce_ms=ra_data.get("debounce_ms", config.random_album.debounce_ms),
            stop_check_window_ms=ra_data.get(
                "stop_check_window_ms", config.random_album.stop_check_window_ms
            ),
        )
        try:
            config.random_album.validate()
        except ValueError as e:
            print(f"Warning: Invalid random_album configuration: {e}")
            print("Using default random_album configuration.")
            config.random_album = RandomAlbumConfig()

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            console_output=logging_data.get(
                "console_output", config.logging.console_output
            ),
        )

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default."""
    config_path = config_path or get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_default_config())
        print(f"Created default configuration at: {config_path}")
        return Config()

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        return _parse_config(toml_data)

    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading configuration from {config_path}: {e}")
        print("Using default configuration.")
        return Config()


def save_config(config: Config, config_path: Optional[Path] = None) -> bool:
    """Save configuration to file."""
    config_path = config_path or get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        toml_content = f"""# Random Album Configuration

[music]
library_paths = {config.music.library_paths!r}
supported_formats = {config.music.supported_formats!r}
scan_recursive = {str(config.music.scan_recursive).lower()}

[player]
volume = {config.player.volume}"""

        if config.player.mpv_socket_path:
            toml_content += f'\nmpv_socket_path = "{config.player.mpv_socket_path}"'

        toml_content += f"""

[random_album]
debounce_ms = {config.random_album.debounce_ms}
stop_check_window_ms = {config.random_album.stop_check_window_ms}

[logging]
level = "{config.logging.level}"
console_output = {str(config.logging.console_output).lower()}"""

        if config.logging.log_file:
            toml_content += f'\nlog_file = "{config.logging.log_file}"'

        toml_content += "\n"

        with open(config_path, "w", encoding="utf-8") as f:
            f.write(toml_content)

        return True

    except OSError as e:
        print(f"Error saving configuration to {config_path}: {e}")
        return False


def ensure_directories() -> None:
    """Ensure all necessary directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
