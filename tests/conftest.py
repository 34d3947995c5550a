# tests/conftest.py
import os
import sys

# Ensure repository root is on PYTHONPATH for tests
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

# Placeholder secrets and quiet defaults for tests
os.environ.setdefault("GOOGLE_API_KEY", "test-key")
os.environ.setdefault("ENABLE_RICH_PROGRESS", "false")
os.environ.setdefault("INTER_TASK_DELAY_SECONDS", "0")
