"""
Selenium browser session used by the dashboard step definitions.
"""
from pathlib import Path
from typing import Callable, Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.service import Service as ChromeService
from selenium.webdriver.common.by import By
from selenium.webdriver.firefox.service import Service as FirefoxService
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager
from webdriver_manager.firefox import GeckoDriverManager

from utils.config_loader import BrowserConfig
from utils.custom_exceptions import BrowserLaunchError, ElementNotFoundError, PageNotReadyError
from utils.logger import browser_logger


def create_driver(config: BrowserConfig) -> WebDriver:
    """Launch a local browser, resolving the driver binary with webdriver-manager."""
    width, height = config.window_size

    if config.browser == 'firefox':
        options = webdriver.FirefoxOptions()
        if config.headless:
            options.add_argument('-headless')
        driver = webdriver.Firefox(
            service=FirefoxService(GeckoDriverManager().install()),
            options=options
        )
    else:
        options = webdriver.ChromeOptions()
        if config.headless:
            options.add_argument('--headless=new')
        options.add_argument('--no-sandbox')
        options.add_argument('--disable-dev-shm-usage')
        driver = webdriver.Chrome(
            service=ChromeService(ChromeDriverManager().install()),
            options=options
        )

    driver.set_window_size(width, height)
    return driver


class BrowserSession:
    """One browser instance, owned by a single scenario."""

    def __init__(self,
                 config: Optional[BrowserConfig] = None,
                 driver_factory: Optional[Callable[[BrowserConfig], WebDriver]] = None):
        """
        Initialize the session without launching anything.

        Args:
            config: Browser settings; defaults apply when omitted
            driver_factory: Callable building a WebDriver from the config
        """
        self.config = config or BrowserConfig()
        self._driver_factory = driver_factory or create_driver
        self._driver: Optional[WebDriver] = None

    @property
    def is_active(self) -> bool:
        return self._driver is not None

    @property
    def driver(self) -> WebDriver:
        if self._driver is None:
            raise PageNotReadyError("Browser session is not started", operation="driver")
        return self._driver

    def start(self) -> 'BrowserSession':
        """Launch the browser. Calling it on a started session does nothing."""
        if self._driver is not None:
            return self

        browser_logger.info(f"Launching {self.config.browser} (headless={self.config.headless})")
        try:
            self._driver = self._driver_factory(self.config)
        except Exception as e:
            browser_logger.error(f"Failed to launch {self.config.browser}: {e}")
            raise BrowserLaunchError(f"Could not start browser session: {e}",
                                     browser=self.config.browser,
                                     headless=self.config.headless) from e

        browser_logger.info("Browser session started")
        return self

    def quit(self) -> None:
        """Release the browser. Safe to call more than once."""
        driver, self._driver = self._driver, None
        if driver is None:
            return

        try:
            driver.quit()
            browser_logger.info("Browser session closed")
        except WebDriverException as e:
            browser_logger.warning(f"Error while closing browser session: {e}")

    def __enter__(self) -> 'BrowserSession':
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.quit()
        return False

    def _wait(self, timeout: Optional[float] = None) -> WebDriverWait:
        return WebDriverWait(
            self.driver,
            timeout if timeout is not None else self.config.page_ready_timeout,
            poll_frequency=self.config.poll_interval
        )

    def open(self, url: str) -> None:
        """Navigate to an absolute URL."""
        browser_logger.info(f"Navigating to: {url}")
        self.driver.get(url)

    @property
    def current_url(self) -> str:
        return self.driver.current_url

    def find_by_id(self, element_id: str, timeout: Optional[float] = None) -> WebElement:
        """
        Wait for an element to be present in the DOM.

        Raises:
            ElementNotFoundError: element did not appear within the timeout
        """
        browser_logger.debug(f"Waiting for element #{element_id}")
        try:
            return self._wait(timeout).until(EC.presence_of_element_located((By.ID, element_id)))
        except TimeoutException as e:
            raise self._not_found(element_id, timeout) from e

    def type_into(self, element_id: str, text: str, timeout: Optional[float] = None) -> None:
        """Type text into the element with the given id."""
        element = self.find_by_id(element_id, timeout)
        browser_logger.info(f"Typing {len(text)} characters into #{element_id}")
        element.send_keys(text)

    def click(self, element_id: str, timeout: Optional[float] = None) -> None:
        """Wait until the element is clickable, then click it."""
        browser_logger.debug(f"Waiting for #{element_id} to be clickable")
        try:
            element = self._wait(timeout).until(EC.element_to_be_clickable((By.ID, element_id)))
        except TimeoutException as e:
            raise self._not_found(element_id, timeout) from e

        browser_logger.info(f"Clicking #{element_id}")
        element.click()

    def wait_for_url(self, expected_url: str, timeout: Optional[float] = None) -> bool:
        """Wait until the browser URL equals expected_url. Returns False on timeout."""
        try:
            self._wait(timeout).until(EC.url_to_be(expected_url))
            return True
        except TimeoutException:
            browser_logger.warning(
                f"URL did not become {expected_url} in time, currently at {self.current_url}")
            return False

    def save_screenshot(self, path: str) -> Path:
        """Save a PNG screenshot, creating the parent directory."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        self.driver.save_screenshot(str(target))
        browser_logger.info(f"Screenshot saved: {target}")
        return target

    def _not_found(self, element_id: str, timeout: Optional[float]) -> ElementNotFoundError:
        waited = timeout if timeout is not None else self.config.page_ready_timeout
        browser_logger.error(f"Element #{element_id} not found after {waited}s")
        return ElementNotFoundError(f"Element '{element_id}' not found",
                                    element_id=element_id,
                                    timeout_seconds=waited,
                                    page_url=self._driver.current_url if self._driver else None)
