import os
import tempfile

import pytest

from hydrator.file_path import hydrator_dir
from hydrator.framework.introspector import Introspector
from hydrator.framework.provider import Provider
from hydrator.log import set_logging_file
from hydrator.user_config import UserConfig

"""
Before running all tests redirect all test logging to a temporary log file
"""


def pytest_configure():
    fo = tempfile.NamedTemporaryFile()
    fo.close()  # Windows workaround for shared files
    pytest.tmp_log_file = fo.name
    pytest.log_test_file = os.path.join(hydrator_dir, "logs", "hydrator_log_test.log")
    if os.path.exists(pytest.log_test_file):
        os.remove(pytest.log_test_file)
    set_logging_file(fo.name, level="DEBUG")


@pytest.fixture
def before_log_test(request):
    os.makedirs(os.path.dirname(pytest.log_test_file), exist_ok=True)
    set_logging_file(pytest.log_test_file, level="DEBUG")


@pytest.fixture
def after_log_test():
    yield
    set_logging_file(pytest.tmp_log_file, level="DEBUG")


@pytest.fixture(autouse=True)
def reset_hydration_cache():
    Introspector.reset_cache()
    yield
    Introspector.reset_cache()


@pytest.fixture
def hydration_settings():
    """Settings that can be changed by a test and are restored afterwards."""
    saved = UserConfig.settings
    UserConfig.settings = saved.model_copy()
    yield UserConfig.settings
    UserConfig.settings = saved


@pytest.fixture
def provider():
    return Provider()
