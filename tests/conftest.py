# tests/conftest.py
"""
Global test bootstrap
- Settings come from the environment, set BEFORE the application is imported
- Rate limiting is switched off
- The user-directory cache is emptied around every test
"""
import os
import tempfile
import pytest

_TMP_DIR = tempfile.mkdtemp(prefix="learnhub-tests-")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'app.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["REFRESH_SECRET_KEY"] = "test-refresh-secret-key"
os.environ["YANDEX_APP_ID"] = "test-yandex-app"
os.environ["YANDEX_APP_SECRET"] = "test-yandex-secret"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ["EXECUTION_SERVICE_URL"] = "http://runner.test/api/v2/execute"
os.environ["EXECUTION_TIMEOUT_SECONDS"] = "2"
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from learnhub.services import user_service  # noqa: E402

from tests.fixtures.db import *     # noqa: F401,F403,E402
from tests.fixtures.app import *    # noqa: F401,F403,E402
from tests.fixtures.users import *  # noqa: F401,F403,E402


@pytest.fixture(autouse=True)
def clear_user_cache():
    """The cache is module-global; keep entries from leaking across databases."""
    user_service.user_cache.clear()
    yield
    user_service.user_cache.clear()
