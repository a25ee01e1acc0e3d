"""
Root conftest for all tests.

Pins configuration that the console reads at import time so tests never talk
to a real backend or Redis, whatever the developer's environment holds.
"""

import os

os.environ.setdefault("TRACCAR_API_URL", "http://testserver/api")
os.environ.setdefault("TOKEN_STORAGE_BACKEND", "app")
os.environ.setdefault("TRACKING_CONSOLE_DEBUG", "true")
