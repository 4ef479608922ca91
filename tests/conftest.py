# tests/conftest.py
from osaka.config import Settings, get_settings
from osaka.main import app

ADMIN_PASSWORD = "test-pass"

# Every API test talks to the memory backend with a known password.
app.dependency_overrides[get_settings] = lambda: Settings(
    admin_password=ADMIN_PASSWORD,
    session_secret="test-secret",
    public_base_url="http://testserver/media",
)
