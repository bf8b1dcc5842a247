"""
Unit tests for browser_session.py module.

The WebDriver is replaced by a mock so no browser is launched.
"""

import unittest
from unittest.mock import MagicMock, patch
import pytest
import os
import sys
import shutil
import tempfile
from pathlib import Path

from selenium.common.exceptions import NoSuchElementException, WebDriverException

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from web.browser_session import BrowserSession, create_driver
from utils.config_loader import BrowserConfig
from utils.custom_exceptions import BrowserLaunchError, ElementNotFoundError, PageNotReadyError


def _visible_element():
    element = MagicMock()
    element.is_displayed.return_value = True
    element.is_enabled.return_value = True
    return element


class TestBrowserSession(unittest.TestCase):
    """Test cases for BrowserSession."""

    def setUp(self):
        self.driver = MagicMock()
        self.driver.current_url = "about:blank"
        self.config = BrowserConfig(page_ready_timeout=0.2, poll_interval=0.01)
        self.factory = MagicMock(return_value=self.driver)
        self.session = BrowserSession(self.config, driver_factory=self.factory)

    def test_not_started(self):
        self.assertFalse(self.session.is_active)
        with self.assertRaises(PageNotReadyError):
            self.session.open("http://localhost:8000/index.html")

    def test_start_is_idempotent(self):
        self.session.start()
        self.session.start()

        self.factory.assert_called_once_with(self.config)
        self.assertTrue(self.session.is_active)

    def test_launch_failure(self):
        self.factory.side_effect = WebDriverException("chrome not reachable")

        with self.assertRaises(BrowserLaunchError) as ctx:
            self.session.start()

        self.assertEqual(ctx.exception.details["browser"], "chrome")
        self.assertFalse(self.session.is_active)

    def test_quit_releases_driver_once(self):
        self.session.start()
        self.session.quit()
        self.session.quit()

        self.driver.quit.assert_called_once()
        self.assertFalse(self.session.is_active)

    def test_quit_error_is_not_raised(self):
        self.driver.quit.side_effect = WebDriverException("already gone")
        self.session.start()

        self.session.quit()

        self.assertFalse(self.session.is_active)

    def test_context_manager_releases_on_error(self):
        with self.assertRaises(RuntimeError):
            with self.session:
                raise RuntimeError("step blew up")

        self.driver.quit.assert_called_once()

    def test_open(self):
        self.session.start()
        self.session.open("http://localhost:8000/index.html")

        self.driver.get.assert_called_once_with("http://localhost:8000/index.html")

    def test_type_into_waits_for_element(self):
        element = _visible_element()
        self.driver.find_element.side_effect = [NoSuchElementException(), element]
        self.session.start()

        self.session.type_into("inputUser", "alice")

        element.send_keys.assert_called_once_with("alice")

    def test_click(self):
        element = _visible_element()
        self.driver.find_element.return_value = element
        self.session.start()

        self.session.click("registerBtn")

        element.click.assert_called_once()

    def test_missing_element(self):
        self.driver.find_element.side_effect = NoSuchElementException()
        self.driver.current_url = "http://localhost:8000/index.html"
        self.session.start()

        with self.assertRaises(ElementNotFoundError) as ctx:
            self.session.find_by_id("inputUser", timeout=0.05)

        self.assertEqual(ctx.exception.details["element_id"], "inputUser")
        self.assertEqual(ctx.exception.details["page_url"], "http://localhost:8000/index.html")

    def test_click_on_hidden_element_times_out(self):
        element = _visible_element()
        element.is_displayed.return_value = False
        self.driver.find_element.return_value = element
        self.session.start()

        with self.assertRaises(ElementNotFoundError):
            self.session.click("addEntryBtn", timeout=0.05)
        element.click.assert_not_called()

    def test_wait_for_url(self):
        self.driver.current_url = "http://localhost:8000/main.html?#settings"
        self.session.start()

        self.assertTrue(self.session.wait_for_url("http://localhost:8000/main.html?#settings"))

    def test_wait_for_url_timeout(self):
        self.driver.current_url = "http://localhost:8000/index.html"
        self.session.start()

        self.assertFalse(self.session.wait_for_url("http://localhost:8000/main.html?#settings",
                                                   timeout=0.05))

    def test_save_screenshot_creates_directory(self):
        temp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, temp_dir)
        self.session.start()

        target = self.session.save_screenshot(os.path.join(temp_dir, "shots", "failed.png"))

        self.assertTrue(Path(temp_dir, "shots").is_dir())
        self.driver.save_screenshot.assert_called_once_with(str(target))


class TestCreateDriver(unittest.TestCase):
    """Test cases for create_driver."""

    @patch('web.browser_session.ChromeService')
    @patch('web.browser_session.ChromeDriverManager')
    @patch('web.browser_session.webdriver')
    def test_headless_chrome(self, mock_webdriver, mock_manager, mock_service):
        options = mock_webdriver.ChromeOptions.return_value

        driver = create_driver(BrowserConfig(headless=True, window_size=(800, 600)))

        options.add_argument.assert_any_call('--headless=new')
        mock_service.assert_called_once_with(mock_manager.return_value.install.return_value)
        mock_webdriver.Chrome.assert_called_once_with(service=mock_service.return_value, options=options)
        driver.set_window_size.assert_called_once_with(800, 600)

    @patch('web.browser_session.FirefoxService')
    @patch('web.browser_session.GeckoDriverManager')
    @patch('web.browser_session.webdriver')
    def test_firefox(self, mock_webdriver, mock_manager, mock_service):
        options = mock_webdriver.FirefoxOptions.return_value

        create_driver(BrowserConfig(browser="firefox"))

        options.add_argument.assert_not_called()
        mock_webdriver.Firefox.assert_called_once()
        mock_webdriver.Chrome.assert_not_called()


if __name__ == '__main__':
    pytest.main([__file__])
