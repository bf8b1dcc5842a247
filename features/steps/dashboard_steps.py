"""
Step definitions for the keycloud dashboard.

Phrases use the regular-expression matcher, which anchors each pattern at
both ends; quoted captures are passed positionally.
"""
from behave import given, when, then, use_step_matcher

from utils.logger import test_logger, log_test_step

use_step_matcher("re")


@given(r'I am on the landing page')
def step_open_landing_page(context):
    """Navigate to the dashboard landing page."""
    log_test_step("open landing page")
    context.browser.open(context.dashboard.landing_url)


@when(r'I type in "([^"]*)" as my username and click register')
def step_register_username(context, username):
    """Fill the username field once it is present and submit the registration."""
    log_test_step("register", username=username)
    context.browser.type_into(context.dashboard.username_input_id, username)
    context.browser.click(context.dashboard.register_button_id)


@then(r'I will be on the settings page of a new created Account')
def step_check_settings_page(context):
    """Verify the browser landed on the settings page after registering."""
    expected = context.dashboard.settings_url
    log_test_step("check settings page", expected=expected)
    context.browser.wait_for_url(expected)
    actual = context.browser.current_url
    assert actual == expected, f"Expected URL {expected}, got {actual}"


@given(r'I am on my home page in the keycloud dashboard')
def step_open_home_page(context):
    """Navigate to the home tab of the dashboard."""
    log_test_step("open home page")
    context.browser.open(context.dashboard.home_url)


@when(r'I press the add button')
def step_press_add_password(context):
    log_test_step("press add button")
    context.browser.click(context.dashboard.add_entry_button_id)


@when(r'I fill out the popup')
def step_fill_out_popup(context):
    log_test_step("save popup")
    context.browser.click(context.dashboard.save_entry_button_id)


# The steps below have no checks yet. They pass without touching the browser.

def _not_implemented(step_name, **captures):
    test_logger.warning(f"Step not implemented, passing without verification: {step_name} {captures}")


@then(r'I will see a new password added to the list')
def step_check_password_added(context):
    _not_implemented("new password added to the list")


@when(r'I press the remove button for the "([^"]*)" password')
def step_remove_password(context, password):
    _not_implemented("remove password", password=password)


@then(r'The password "([^"]*)" entry is removed from the list')
def step_check_password_removed(context, password):
    _not_implemented("password removed from the list", password=password)


@when(r'I copy the password for "([^"]*)" to clipboard')
def step_copy_password(context, url):
    _not_implemented("copy password to clipboard", url=url)


@then(r'I have the password for "([^"]*)" in my clipboard')
def step_check_clipboard(context, url):
    _not_implemented("password in clipboard", url=url)


use_step_matcher("parse")
