import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the test environment is fixed before
# any backend module loads.
_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="vulnsentry-tests-"))
os.environ.setdefault("DB_URL", f"sqlite:///{(_TEST_DATA_DIR / 'test.db').as_posix()}")
os.environ.setdefault("DATA_DIR", _TEST_DATA_DIR.as_posix())
os.environ.setdefault("SCAN_PENDING_DELAY", "0")
os.environ.setdefault("SCAN_PROGRESS_DELAY", "0")
os.environ.setdefault("REPORT_DELAY", "0")
os.environ.setdefault("REPORT_FAILURE_RATE", "0")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("SEED_DEMO_DATA", "true")
os.environ.pop("OPENAI_API_KEY", None)
