"""
Settings for the command line tools, from environment variables and an optional .env file.

Priority order:
1. Environment variables.
2. The .env file, found by checking these locations in order:
   a. The directory specified by the GANTTSYNTAX_CONFIG_PATH environment variable. It must be an absolute path.
   b. The current working directory (CWD).
3. Default values.

The parser, exporters and detector don't read these settings. They take
plain arguments, so they behave the same regardless of the environment.

Usage: without any GANTTSYNTAX_CONFIG_PATH environment variable.
PROMPT> python -m ganttsyntax.utils.ganttsyntax_config

Usage: with a GANTTSYNTAX_CONFIG_PATH environment variable set.
PROMPT> GANTTSYNTAX_CONFIG_PATH='/Users/alice/gantt' python -m ganttsyntax.utils.ganttsyntax_config
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, Mapping, Optional
import logging
import os
from dotenv import dotenv_values
from ganttsyntax.detect.schedule_detector import DEFAULT_SCHEDULE_THRESHOLD
from ganttsyntax.utils.date_utils import DEFAULT_DATE_FORMAT, DateTemplate

logger = logging.getLogger(__name__)

DOTENV_FILENAME = ".env"

class ConfigKeyEnum(str, Enum):
    CONFIG_PATH = "GANTTSYNTAX_CONFIG_PATH"
    DATE_FORMAT = "GANTTSYNTAX_DATE_FORMAT"
    SCHEDULE_THRESHOLD = "GANTTSYNTAX_SCHEDULE_THRESHOLD"
    CSV_INCLUDE_BOM = "GANTTSYNTAX_CSV_INCLUDE_BOM"
    LOG_LEVEL = "GANTTSYNTAX_LOG_LEVEL"

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

class GanttSyntaxConfigError(Exception):
    """Raised when a configuration value is invalid."""
    pass

@dataclass
class GanttSyntaxConfig:
    """
    Resolved settings.

    Attributes:
        dotenv_path: Optional[Path] - The .env file the settings were read from, if any
        date_format: str - Date template used for CSV export/import
        schedule_threshold: float - Minimum confidence for text to count as a schedule
        csv_include_bom: bool - Whether exported CSV starts with a UTF-8 BOM
        log_level: str - Level for logging.basicConfig in the command line tools
    """
    dotenv_path: Optional[Path] = None
    date_format: str = DEFAULT_DATE_FORMAT
    schedule_threshold: float = DEFAULT_SCHEDULE_THRESHOLD
    csv_include_bom: bool = True
    log_level: str = "INFO"

    _instance: ClassVar[Optional['GanttSyntaxConfig']] = None

    @classmethod
    def load(cls) -> 'GanttSyntaxConfig':
        """
        Loads the settings. The result is cached, use clear_cache() to load again.

        :raises: GanttSyntaxConfigError if a setting has an invalid value
        """
        if cls._instance is not None:
            return cls._instance

        logger.debug("GanttSyntaxConfig.load() creating a new instance...")
        config_path = cls.resolve_config_path()
        dotenv_path = cls.find_dotenv_file(config_path)
        dotenv_dict: dict[str, Optional[str]] = {}
        if dotenv_path is not None:
            dotenv_dict = dotenv_values(dotenv_path=dotenv_path)

        cls._instance = cls.from_mapping(os.environ, dotenv_dict, dotenv_path=dotenv_path)
        return cls._instance

    @classmethod
    def clear_cache(cls) -> None:
        cls._instance = None

    @classmethod
    def from_mapping(
        cls,
        environ: Mapping[str, str],
        dotenv_dict: Mapping[str, Optional[str]],
        dotenv_path: Optional[Path] = None,
    ) -> 'GanttSyntaxConfig':
        """Build the settings from environment variables, falling back to the .env values, then the defaults."""
        def lookup(key: ConfigKeyEnum) -> Optional[str]:
            value = environ.get(key.value)
            if value:
                return value.strip()
            value = dotenv_dict.get(key.value)
            if value:
                return value.strip()
            return None

        config = cls(dotenv_path=dotenv_path)

        date_format = lookup(ConfigKeyEnum.DATE_FORMAT)
        if date_format is not None:
            if not DateTemplate.compile(date_format).has_all_tokens():
                msg = f"{ConfigKeyEnum.DATE_FORMAT.value} must contain YYYY, MM and DD: {date_format!r}"
                logger.error(msg)
                raise GanttSyntaxConfigError(msg)
            config.date_format = date_format

        threshold = lookup(ConfigKeyEnum.SCHEDULE_THRESHOLD)
        if threshold is not None:
            try:
                value = float(threshold)
            except ValueError:
                value = -1.0
            if not 0.0 <= value <= 1.0:
                msg = f"{ConfigKeyEnum.SCHEDULE_THRESHOLD.value} must be a number between 0 and 1: {threshold!r}"
                logger.error(msg)
                raise GanttSyntaxConfigError(msg)
            config.schedule_threshold = value

        include_bom = lookup(ConfigKeyEnum.CSV_INCLUDE_BOM)
        if include_bom is not None:
            if include_bom.lower() in TRUE_VALUES:
                config.csv_include_bom = True
            elif include_bom.lower() in FALSE_VALUES:
                config.csv_include_bom = False
            else:
                msg = f"{ConfigKeyEnum.CSV_INCLUDE_BOM.value} must be true or false: {include_bom!r}"
                logger.error(msg)
                raise GanttSyntaxConfigError(msg)

        log_level = lookup(ConfigKeyEnum.LOG_LEVEL)
        if log_level is not None:
            if log_level.upper() not in LOG_LEVELS:
                msg = f"{ConfigKeyEnum.LOG_LEVEL.value} must be one of {', '.join(LOG_LEVELS)}: {log_level!r}"
                logger.error(msg)
                raise GanttSyntaxConfigError(msg)
            config.log_level = log_level.upper()

        return config

    @classmethod
    def resolve_config_path(cls) -> Optional[Path]:
        """
        Resolves and validates the GANTTSYNTAX_CONFIG_PATH environment variable.
        It's expected to be an absolute path to a directory.

        :return: A Path object if valid, otherwise None.
        """
        path_str = os.environ.get(ConfigKeyEnum.CONFIG_PATH.value)
        if path_str is None:
            logger.debug(f"{ConfigKeyEnum.CONFIG_PATH.value} is not set")
            return None

        path_obj = Path(path_str)
        if not path_obj.is_absolute():
            logger.error(f"{ConfigKeyEnum.CONFIG_PATH.value} must be an absolute path: {path_obj!r}")
            return None
        if not path_obj.is_dir():
            logger.error(f"{ConfigKeyEnum.CONFIG_PATH.value} must be a directory: {path_obj!r}")
            return None
        logger.debug(f"Using {ConfigKeyEnum.CONFIG_PATH.value}: {path_obj!r}")
        return path_obj

    @classmethod
    def find_dotenv_file(cls, config_path: Optional[Path]) -> Optional[Path]:
        """
        Search order:
        1. Directory from a validated GANTTSYNTAX_CONFIG_PATH.
        2. Current Working Directory (CWD).

        :return: The Path to the .env file if found, otherwise None.
        """
        if config_path is not None:
            config_file_path = config_path / DOTENV_FILENAME
            if config_file_path.is_file():
                logger.debug(f"Found {DOTENV_FILENAME!r} at config_file_path: {config_file_path!r}")
                return config_file_path

        cwd_file_path = Path.cwd() / DOTENV_FILENAME
        if cwd_file_path.is_file():
            logger.debug(f"Found {DOTENV_FILENAME!r} at cwd_file_path: {cwd_file_path!r}")
            return cwd_file_path

        logger.debug(f"{DOTENV_FILENAME!r} not found, using environment variables and defaults")
        return None

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    config = GanttSyntaxConfig.load()
    print(f"config: {config!r}")
