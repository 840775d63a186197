import logging
import os
from collections import ChainMap
from typing import NamedTuple, Dict, Any, Mapping

from .identifier import DEFAULT_SEPARATORS, FILENAME_SEPARATOR
from .util import dirs, file_util

ENV_PREFIX = "STASH_"


class Option(NamedTuple):
    key: str
    default: Any
    help: str = ""

    @property
    def env_var(self) -> str:
        return ENV_PREFIX + self.key.upper()


class Settings:
    DATA_DIR = Option("data_dir", None, "Directory the stashes are kept in (defaults to the platform's data dir)")
    LOG_LEVEL = Option("log_level", "INFO", "Logging level, a name (DEBUG, INFO, ...) or a number (10, 20, ...)")
    SEPARATORS = Option("separators", DEFAULT_SEPARATORS, "Characters that separate name and index in identifiers")
    COLORIZE = Option("colorize", True, "Enable colored output")
    CONFIG = Option("config", None, "JSON config file (defaults to config.json in the platform's config dir)")


def get_all_settings() -> list[Option]:
    return [option for _name, option in vars(Settings).items() if isinstance(option, Option)]


def conf_get(d, option: Option):
    return d.get(option.key, option.default)


def _parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def read_env(environ) -> Dict[str, object]:
    result = {}
    for option in get_all_settings():
        if option.env_var in environ:
            result[option.key] = environ[option.env_var]
    return result


def default_config_file(environ) -> str:
    return str(dirs.config_dir(environ=environ) / "config.json")


def read_config(config_file, required=False) -> Dict[str, object]:
    """Reads the JSON config file, a missing file is only an error if it was explicitly asked for."""
    if not os.path.isfile(config_file):
        if required:
            raise ValueError(f"Config file not found: {config_file}")
        return {}
    config_dict = file_util.parse_json(config_file)
    if not isinstance(config_dict, dict):
        raise ValueError(f"Expected a JSON object in {config_file}")
    return config_dict


def parse_log_level(value) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    level = str(value).strip().upper()
    if level.isascii() and level.isdigit():
        return int(level)
    numeric = logging.getLevelName(level)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {value}")
    return numeric


def validate(conf: Mapping[str, object]) -> Mapping[str, object]:
    conf[Settings.LOG_LEVEL.key] = parse_log_level(conf_get(conf, Settings.LOG_LEVEL))

    separators = conf_get(conf, Settings.SEPARATORS)
    if not separators or not isinstance(separators, str):
        raise ValueError("At least one identifier separator is needed")
    if FILENAME_SEPARATOR in separators or "/" in separators:
        raise ValueError(f"'{FILENAME_SEPARATOR}' and '/' can't be used as identifier separators")
    return conf


def load_config(cli_args: Dict[str, object] = None, environ=os.environ) -> Mapping[str, object]:
    """Creates a dict-like configuration from all the places settings can come from
    Priority order:
    1. command-line arguments
    2. environment variables (STASH_*)
    3. config file
    4. default values
    """
    cli_args = {k: v for k, v in (cli_args or {}).items() if v is not None}
    env_args = read_env(environ)

    explicit_config = cli_args.get(Settings.CONFIG.key) or env_args.get(Settings.CONFIG.key)
    config_file = explicit_config or default_config_file(environ)
    file_args = read_config(config_file, required=bool(explicit_config))

    defaults = {option.key: option.default for option in get_all_settings() if option.default is not None}
    defaults[Settings.DATA_DIR.key] = str(dirs.data_dir(environ=environ))
    defaults[Settings.CONFIG.key] = config_file

    conf = ChainMap({}, cli_args, env_args, file_args, defaults)
    conf[Settings.COLORIZE.key] = _parse_bool(conf_get(conf, Settings.COLORIZE))
    return validate(conf)
