import pytest

from fakes import FakeBrowser, CountingResolver
from handlers.common import ExecutionContext


@pytest.fixture
def browser(tmp_path):
    return FakeBrowser(screenshot_dir=str(tmp_path))


@pytest.fixture
def resolver():
    return CountingResolver()


@pytest.fixture
def context(browser, resolver):
    return ExecutionContext(browser=browser, resolver=resolver)
