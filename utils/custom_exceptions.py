"""Custom exceptions for the keycloud dashboard test suite."""
from typing import Optional, Any, Dict


class KeycloudTestError(Exception):
    """Base exception for all test suite errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(KeycloudTestError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None,
                 config_file: Optional[str] = None, **kwargs):
        details = {"config_key": config_key, "config_file": config_file}
        details.update(kwargs)
        super().__init__(message, details)


class BrowserLaunchError(KeycloudTestError):
    """Raised when the browser driver session cannot be started."""

    def __init__(self, message: str, browser: Optional[str] = None,
                 headless: Optional[bool] = None, **kwargs):
        details = {"browser": browser, "headless": headless}
        details.update(kwargs)
        super().__init__(message, details)


class ElementNotFoundError(KeycloudTestError):
    """Raised when a DOM element does not appear within the wait timeout."""

    def __init__(self, message: str, element_id: Optional[str] = None,
                 timeout_seconds: Optional[float] = None,
                 page_url: Optional[str] = None, **kwargs):
        details = {
            "element_id": element_id,
            "timeout_seconds": timeout_seconds,
            "page_url": page_url
        }
        details.update(kwargs)
        super().__init__(message, details)


class PageNotReadyError(KeycloudTestError):
    """Raised when a browser operation is attempted without a live session."""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        details = {"operation": operation}
        details.update(kwargs)
        super().__init__(message, details)
