"""Configure test suite environment"""
import os
import sys

# Add the project root directory to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)

# Settings read at import time by the clients and the shared logger
os.environ.setdefault("MEALPREP_TABLE_NAME", "mealprep-test")
os.environ.setdefault("HISTORY_INDEX_NAME", "HistoryIndex")
os.environ.setdefault("IDENTITY_API_KEY", "test-api-key")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "mealprep-api")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
