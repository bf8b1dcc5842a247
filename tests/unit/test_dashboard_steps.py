"""
Unit tests for the dashboard step definitions.

Steps are called directly with a stand-in behave context; phrase matching is
checked against behave's step registry.
"""

import unittest
from unittest.mock import MagicMock, Mock, call
import pytest
import os
import sys

from behave.model import Step
from behave.step_registry import registry

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from features.steps import dashboard_steps as steps
from utils.config_loader import BrowserConfig, DashboardConfig
from web.browser_session import BrowserSession


SETTINGS_URL = "http://localhost:8000/main.html?#settings"


class TestStepPhrases(unittest.TestCase):
    """Phrases from the feature files resolve to the right functions."""

    def _match(self, step_type, text):
        return registry.find_match(Step("test.feature", 1, step_type.title(), step_type, text))

    def test_register_phrase_captures_username(self):
        match = self._match("when", 'I type in "alice" as my username and click register')

        self.assertIs(match.func, steps.step_register_username)
        self.assertEqual([arg.value for arg in match.arguments], ["alice"])

    def test_empty_capture(self):
        match = self._match("when", 'I press the remove button for the "" password')

        self.assertIs(match.func, steps.step_remove_password)
        self.assertEqual([arg.value for arg in match.arguments], [""])

    def test_navigation_phrases(self):
        self.assertIs(self._match("given", "I am on the landing page").func,
                      steps.step_open_landing_page)
        self.assertIs(self._match("given", "I am on my home page in the keycloud dashboard").func,
                      steps.step_open_home_page)

    def test_phrase_is_anchored(self):
        self.assertIsNone(self._match("given", "I am on the landing page twice"))


class TestDashboardSteps(unittest.TestCase):
    """Test cases for step behavior against a mocked BrowserSession."""

    def setUp(self):
        self.context = Mock()
        self.context.dashboard = DashboardConfig()
        self.context.browser = MagicMock(spec=BrowserSession)

    def test_open_landing_page(self):
        steps.step_open_landing_page(self.context)
        self.context.browser.open.assert_called_once_with("http://localhost:8000/index.html")

    def test_open_home_page(self):
        steps.step_open_home_page(self.context)
        self.context.browser.open.assert_called_once_with("http://localhost:8000/main.html#home")

    def test_register_types_then_clicks(self):
        steps.step_register_username(self.context, "alice")

        self.assertEqual(self.context.browser.mock_calls, [
            call.type_into("inputUser", "alice"),
            call.click("registerBtn"),
        ])

    def test_settings_page_reached(self):
        self.context.browser.current_url = SETTINGS_URL

        steps.step_check_settings_page(self.context)

        self.context.browser.wait_for_url.assert_called_once_with(SETTINGS_URL)

    def test_settings_page_mismatch(self):
        self.context.browser.wait_for_url.return_value = False
        self.context.browser.current_url = "http://localhost:8000/index.html"

        with self.assertRaises(AssertionError) as ctx:
            steps.step_check_settings_page(self.context)

        self.assertIn(SETTINGS_URL, str(ctx.exception))
        self.assertIn("http://localhost:8000/index.html", str(ctx.exception))

    def test_add_and_save_entry(self):
        steps.step_press_add_password(self.context)
        steps.step_fill_out_popup(self.context)

        self.assertEqual(self.context.browser.mock_calls, [
            call.click("addEntryBtn"),
            call.click("saveEntryBtn"),
        ])

    def test_unimplemented_steps_never_touch_browser(self):
        for label in ["", "google.com", "https://www.google.com", 'weird "quoted" label']:
            steps.step_remove_password(self.context, label)
            steps.step_check_password_removed(self.context, label)
            steps.step_copy_password(self.context, label)
            steps.step_check_clipboard(self.context, label)
        steps.step_check_password_added(self.context)

        self.assertEqual(self.context.browser.mock_calls, [])


class TestRegistrationFlow(unittest.TestCase):
    """Registration scenario against a real BrowserSession over a fake driver."""

    def test_alice_lands_on_settings(self):
        driver = MagicMock()
        driver.current_url = "about:blank"
        element = MagicMock()
        element.is_displayed.return_value = True
        element.is_enabled.return_value = True
        element.click.side_effect = lambda: setattr(driver, "current_url", SETTINGS_URL)
        driver.find_element.return_value = element

        context = Mock()
        context.dashboard = DashboardConfig()
        context.browser = BrowserSession(BrowserConfig(page_ready_timeout=0.5, poll_interval=0.01),
                                         driver_factory=lambda config: driver).start()

        steps.step_open_landing_page(context)
        steps.step_register_username(context, "alice")
        steps.step_check_settings_page(context)

        driver.get.assert_called_once_with("http://localhost:8000/index.html")
        element.send_keys.assert_called_once_with("alice")
        self.assertEqual(context.browser.current_url, SETTINGS_URL)


if __name__ == '__main__':
    pytest.main([__file__])
