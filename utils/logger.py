"""
Logging utility for the dashboard test suite.
"""
import logging
import logging.handlers
import os
import sys
import json
from pathlib import Path
from datetime import datetime
from typing import Optional, Dict, Any
import threading
import traceback


STANDARD_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
VALID_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Format log record with colors."""
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        original = record.levelname
        record.levelname = f"{color}{original}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record):
        """Format log record as JSON."""
        log_obj = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__,  # type: ignore
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        return json.dumps(log_obj, default=str, ensure_ascii=False)


class EnhancedLogger:
    """Registry of named loggers sharing one configuration."""

    def __init__(self):
        self._loggers: Dict[str, logging.Logger] = {}
        self._lock = threading.Lock()
        self._config = self._load_default_config()

    def _load_default_config(self) -> Dict[str, Any]:
        """Load logging configuration from config.ini, then environment variables."""
        config = {'log_level': 'INFO'}

        try:
            import configparser
            config_path = Path('config/config.ini')
            if config_path.exists():
                parser = configparser.ConfigParser()
                parser.read(config_path)
                if 'log_level' in parser['DEFAULT']:
                    config['log_level'] = parser['DEFAULT']['log_level']
        except Exception as e:
            print(f"Warning: Could not load log_level from config.ini: {e}")

        config['log_level'] = os.getenv('LOG_LEVEL', config['log_level'])

        config.update({
            'log_format': os.getenv('LOG_FORMAT', 'standard'),  # standard, json, colored
            'max_file_size': int(os.getenv('LOG_MAX_FILE_SIZE', '10485760')),  # 10MB
            'backup_count': int(os.getenv('LOG_BACKUP_COUNT', '5')),
            'log_to_console': os.getenv('LOG_TO_CONSOLE', 'true').lower() == 'true',
            'log_to_file': os.getenv('LOG_TO_FILE', 'true').lower() == 'true',
            'logs_base_dir': os.getenv('LOGS_BASE_DIR', 'logs'),
        })

        return config

    def setup_logger(
        self,
        name: str,
        log_level: Optional[str] = None,
        log_to_file: Optional[bool] = None,
        log_to_console: Optional[bool] = None
    ) -> logging.Logger:
        """
        Set up a named logger once and cache it.

        Args:
            name: Logger name
            log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_to_file: Whether to log to file
            log_to_console: Whether to log to console

        Returns:
            Configured logger instance
        """
        with self._lock:
            if name in self._loggers:
                return self._loggers[name]

            logger = logging.getLogger(name)
            logger.handlers.clear()

            level = log_level or self._config['log_level']
            logger.setLevel(getattr(logging, level.upper()))

            format_type = self._config['log_format']
            if format_type == 'json':
                formatter = JSONFormatter()
            else:
                formatter = logging.Formatter(STANDARD_FORMAT)

            if log_to_console if log_to_console is not None else self._config['log_to_console']:
                console_handler = logging.StreamHandler(sys.stdout)
                if format_type == 'colored' and sys.stdout.isatty():
                    console_handler.setFormatter(ColoredFormatter(STANDARD_FORMAT))
                else:
                    console_handler.setFormatter(formatter)
                logger.addHandler(console_handler)

            if log_to_file if log_to_file is not None else self._config['log_to_file']:
                self._add_file_handler(logger, formatter)

            logger.propagate = False

            self._loggers[name] = logger
            return logger

    def _add_file_handler(self, logger: logging.Logger, formatter: logging.Formatter):
        """Attach the shared rotating log file."""
        logs_dir = Path(self._config['logs_base_dir'])
        logs_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            logs_dir / "keycloud_tests.log",
            maxBytes=self._config['max_file_size'],
            backupCount=self._config['backup_count'],
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    def get_logger(self, name: str) -> logging.Logger:
        """Get existing logger or create new one with default settings."""
        if name in self._loggers:
            return self._loggers[name]
        return self.setup_logger(name)

    def configure_from_dict(self, config: Dict[str, Any]):
        """Update configuration and apply the level to existing loggers."""
        self._config.update(config)
        level = self._config.get('log_level', 'INFO')
        for logger in self._loggers.values():
            logger.setLevel(getattr(logging, level.upper()))

    def reload_config_from_ini(self) -> Dict[str, Any]:
        """Reload configuration from config.ini file."""
        self.configure_from_dict(self._load_default_config())
        return self._config


_enhanced_logger = EnhancedLogger()


def setup_logger(name: str, log_level: Optional[str] = None) -> logging.Logger:
    """Set up a logger with the shared configuration."""
    return _enhanced_logger.setup_logger(name=name, log_level=log_level)


def get_logger(name: str) -> logging.Logger:
    """Get logger by name."""
    return _enhanced_logger.get_logger(name)


def set_log_level(level: str) -> str:
    """Set log level for all loggers and update configuration."""
    level = level.upper()
    if level not in VALID_LEVELS:
        raise ValueError(f"Invalid log level: {level}")

    _enhanced_logger.configure_from_dict({'log_level': level})
    return level


def get_current_log_level() -> str:
    """Get current log level from configuration."""
    return _enhanced_logger._config.get('log_level', 'INFO')


def initialize_test_logging() -> Dict[str, Any]:
    """Initialize logging for a behave run."""
    config = _enhanced_logger.reload_config_from_ini()

    logger.info("Test logging initialized")
    logger.info(f"Active log level: {get_current_log_level()}")

    return config


def log_test_step(step_name: str, **context):
    """Log a test step with context information."""
    context_str = ', '.join(f'{k}={v}' for k, v in context.items()) if context else ''
    message = f"Test Step: {step_name}"
    if context_str:
        message += f" | Context: {context_str}"

    test_logger.info(message)


logger = setup_logger("keycloud")
test_logger = setup_logger("test_execution")
browser_logger = setup_logger("browser")


__all__ = [
    'setup_logger', 'get_logger', 'set_log_level', 'get_current_log_level',
    'initialize_test_logging', 'log_test_step',
    'logger', 'test_logger', 'browser_logger',
    'EnhancedLogger', 'ColoredFormatter', 'JSONFormatter'
]
