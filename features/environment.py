# features/environment.py
import re
import time
from datetime import datetime
from pathlib import Path

from behave import fixture, use_fixture

from utils.config_loader import config_loader
from utils.logger import logger, test_logger, initialize_test_logging
from web.browser_session import BrowserSession


@fixture
def browser_session(context, browser_config=None):
    """Browser owned by one scenario; released when the scenario layer is popped."""
    session = BrowserSession(browser_config or context.browser_config).start()
    context.browser = session
    try:
        yield session
    finally:
        session.quit()


def before_all(context):
    """Setup before all tests."""
    initialize_test_logging()
    logger.info("Starting keycloud dashboard test execution")
    context.test_start_time = time.time()

    context.dashboard = config_loader.get_dashboard_config()
    context.browser_config = config_loader.get_browser_config()
    logger.info(f"Dashboard under test: {context.dashboard.base_url}")

    context.test_config = {
        'start_time': context.test_start_time,
        'total_scenarios': 0,
        'passed_scenarios': 0,
        'failed_scenarios': 0
    }


def before_feature(context, feature):
    """Setup before each feature."""
    logger.info(f"Starting feature: {feature.name}")
    context.feature_start_time = time.time()

    context.feature_scenarios = 0
    context.feature_passed = 0
    context.feature_failed = 0


def before_scenario(context, scenario):
    """Launch a browser for scenarios carrying the browser tag."""
    test_logger.info(f"Starting scenario: {scenario.name}")
    context.scenario_start_time = time.time()

    if context.browser_config.browser_tag in scenario.effective_tags:
        use_fixture(browser_session, context)


def after_scenario(context, scenario):
    """Record the outcome and release the browser, whatever happened in the steps."""
    scenario_duration = time.time() - context.scenario_start_time

    context.test_config['total_scenarios'] += 1
    context.feature_scenarios += 1

    session = getattr(context, 'browser', None)

    if scenario.status.name == "passed":
        test_logger.info(f"✓ Scenario passed: {scenario.name} (Duration: {scenario_duration:.2f}s)")
        context.test_config['passed_scenarios'] += 1
        context.feature_passed += 1
    else:
        test_logger.error(f"✗ Scenario failed: {scenario.name} (Duration: {scenario_duration:.2f}s)")
        context.test_config['failed_scenarios'] += 1
        context.feature_failed += 1

        if session is not None and session.is_active and context.browser_config.screenshot_on_failure:
            _save_failure_screenshot(context, scenario, session)

    if session is not None:
        session.quit()


def _save_failure_screenshot(context, scenario, session):
    name = re.sub(r'[^\w.-]+', '_', scenario.name).strip('_') or 'scenario'
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = Path(context.browser_config.screenshot_dir) / f"{name}_{timestamp}.png"
    try:
        session.save_screenshot(str(path))
    except Exception as e:
        logger.warning(f"Could not capture failure screenshot: {e}")


def after_step(context, step):
    """Log step execution details."""
    if step.status.name == "failed":
        test_logger.error(f"Step failed: {step.name}")
        if getattr(step, 'exception', None):
            test_logger.error(f"Exception: {step.exception}")


def after_feature(context, feature):
    """Cleanup after each feature."""
    feature_duration = time.time() - context.feature_start_time

    logger.info(f"Feature completed: {feature.name} (Duration: {feature_duration:.2f}s)")
    logger.info(f"Feature stats - Total: {context.feature_scenarios}, "
                f"Passed: {context.feature_passed}, Failed: {context.feature_failed}")


def after_all(context):
    """Log the execution summary."""
    total_duration = time.time() - context.test_start_time

    logger.info("=" * 60)
    logger.info("TEST EXECUTION SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total duration: {total_duration:.2f}s")
    logger.info(f"Total scenarios: {context.test_config['total_scenarios']}")
    logger.info(f"Passed scenarios: {context.test_config['passed_scenarios']}")
    logger.info(f"Failed scenarios: {context.test_config['failed_scenarios']}")

    if context.test_config['total_scenarios'] > 0:
        pass_rate = (context.test_config['passed_scenarios'] / context.test_config['total_scenarios']) * 100
        logger.info(f"Pass rate: {pass_rate:.1f}%")

    logger.info("=" * 60)
