import pytest, os, sys

# Ensure the project root is in path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

# Configuration is read at import time
os.environ["OWNERCERT_ENV"] = "dev"
os.environ["CERTIFICATE_SECRET"] = "service-test-secret"
os.environ["BASE_URL"] = "https://certs.example.com"
os.environ["OWNERCERT_LOG_JSON"] = "false"

# Initialize app at module load time
from ownercert_service.main import app, _startup

_startup()


@pytest.fixture
def png_bytes():
    return make_png("red")


@pytest.fixture
def other_png_bytes():
    return make_png("blue")


def make_png(color):
    from io import BytesIO
    from PIL import Image

    buf = BytesIO()
    Image.new("RGB", (16, 16), color).save(buf, format="PNG")
    return buf.getvalue()
