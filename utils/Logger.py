#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from colorama import init, Fore, Style
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path
import threading

init()

DEFAULT_LOGGING = {
    "logging_levels": "All",
    "logging_file_levels": "None",
    "log_file": "auth.log",
    "log_dir": "logs",
    "date_format": "[%Y-%m-%d %H:%M:%S]",
}


class DebugColorLevel(Enum):
    SUCCESS = Fore.GREEN + Style.BRIGHT
    INFO = Fore.BLUE + Style.BRIGHT
    WARNING = Fore.YELLOW + Style.BRIGHT
    ERROR = Fore.RED + Style.BRIGHT
    DEBUG = Fore.CYAN + Style.BRIGHT


class DebugLevel(IntEnum):
    NONE = 0x00
    SUCCESS = 0x01
    INFO = 0x02
    WARNING = 0x08
    ERROR = 0x10
    DEBUG = 0x20
    ALL = 0xff


class Logger:
    """Unified colored console logger + file logger."""

    _settings: dict = dict(DEFAULT_LOGGING)
    _console_mask: DebugLevel = DebugLevel.ALL
    _file_mask: DebugLevel = DebugLevel.NONE
    _file_lock = threading.Lock()

    @staticmethod
    def _get_logging_mask(levels):
        level_map = {
            'None': DebugLevel.NONE,
            'Success': DebugLevel.SUCCESS,
            'Information': DebugLevel.INFO,
            'Warning': DebugLevel.WARNING,
            'Error': DebugLevel.ERROR,
            'Debug': DebugLevel.DEBUG,
            'All': DebugLevel.ALL
        }

        mask = DebugLevel.NONE
        for level in levels:
            if level in level_map:
                mask |= level_map[level]

        return mask

    @classmethod
    def configure(cls, logging_cfg: dict | None) -> None:
        """Apply the ``Logging`` section of the configuration."""
        settings = dict(DEFAULT_LOGGING)
        settings.update(logging_cfg or {})
        cls._settings = settings
        cls._console_mask = cls._get_logging_mask(
            str(settings["logging_levels"]).split(', ')
        )
        cls._file_mask = cls._get_logging_mask(
            str(settings["logging_file_levels"]).split(', ')
        )

    @classmethod
    def set_level(cls, levels: str) -> None:
        cls._console_mask = cls._get_logging_mask(levels.split(', '))

    @classmethod
    def _should_log(cls, level: DebugLevel):
        return (cls._console_mask & level) != 0

    @classmethod
    def _should_log_file(cls, level: DebugLevel):
        return (cls._file_mask & level) != 0

    @classmethod
    def _colorize(cls, label, color, msg):
        date = datetime.now().strftime(cls._settings['date_format'])
        if label:
            return f"{color.value}{label}{Style.RESET_ALL}{date} {msg}"
        return msg

    @classmethod
    def _log_path(cls) -> Path:
        return Path(cls._settings['log_dir']) / cls._settings['log_file']

    @classmethod
    def add_to_log(cls, msg, level_tag):
        date = datetime.now().strftime(cls._settings['date_format'])

        if level_tag:
            line = f"[{level_tag}] {date} {msg}"
        else:
            line = msg

        path = cls._log_path()
        with cls._file_lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding='utf-8', errors='replace') as log:
                log.write(line + "\n")

    # ===================================================================
    # Console + File logging methods
    # ===================================================================

    @classmethod
    def _emit(cls, level: DebugLevel, color: DebugColorLevel, tag: str, msg):
        if cls._should_log(level):
            print(cls._colorize(f"[{tag}]", color, msg))
        if cls._should_log_file(level):
            cls.add_to_log(msg, tag)

    @staticmethod
    def debug(msg):
        Logger._emit(DebugLevel.DEBUG, DebugColorLevel.DEBUG, "DEBUG", msg)

    @staticmethod
    def info(msg):
        Logger._emit(DebugLevel.INFO, DebugColorLevel.INFO, "INFO", msg)

    @staticmethod
    def warning(msg):
        Logger._emit(DebugLevel.WARNING, DebugColorLevel.WARNING, "WARNING", msg)

    @staticmethod
    def error(msg):
        Logger._emit(DebugLevel.ERROR, DebugColorLevel.ERROR, "ERROR", msg)

    @staticmethod
    def success(msg):
        Logger._emit(DebugLevel.SUCCESS, DebugColorLevel.SUCCESS, "SUCCESS", msg)
