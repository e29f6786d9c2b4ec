"""
Runtime configuration, read from the environment (.env is loaded by main).
"""

import logging
import os


API_SECRET = os.environ.get("API_SECRET_KEY", "")
GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")

FETCH_TIMEOUT = float(os.environ.get("FETCH_TIMEOUT", 15.0))
PAGESPEED_TIMEOUT = float(os.environ.get("PAGESPEED_TIMEOUT", 30.0))

# Pause between two scans sharing the scan session
SCAN_SETTLE_DELAY = float(os.environ.get("SCAN_SETTLE_DELAY", 2.0))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
