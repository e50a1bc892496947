# Root conftest.py - loads .env before test collection so MEDIAN_BOOTSTRAP_*
# settings used during local runs are visible to the tests that read them.
from dotenv import load_dotenv
load_dotenv()

# Fixtures live in tests/conftest.py and are discovered automatically.
