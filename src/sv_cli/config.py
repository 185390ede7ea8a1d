import tomllib
from pathlib import Path

from pydantic import ValidationError
from sv_formatter import ConfigError, FormatterConfig


class FmtConfig:
    """Handles loading and validation of sv-fmt.toml configuration"""

    DEFAULT_CONFIG_NAME = "sv-fmt.toml"

    def __init__(self, config_path: Path | None = None, search_dir: Path | None = None):
        self.path: Path | None = None
        self.options = FormatterConfig()

        if config_path is None:
            candidate = (search_dir or Path.cwd()) / self.DEFAULT_CONFIG_NAME
            if candidate.is_file():
                config_path = candidate
        if config_path is not None:
            self._load_from_file(config_path)

    def _load_from_file(self, path: Path):
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise ConfigError(f"cannot read config file {path}: {e.strerror or e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"invalid TOML in {path}: {e}") from e

        try:
            self.options = FormatterConfig.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
                for error in e.errors()
            )
            raise ConfigError(f"invalid configuration in {path}: {problems}") from e
        self.path = path
