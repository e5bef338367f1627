# ytprompt/config.py
import os
import logging


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Injection retry loop (YouTube loads chunks late)
INJECT_MAX_ATTEMPTS = int(os.getenv("INJECT_MAX_ATTEMPTS", "20"))
INJECT_INTERVAL_MS = int(os.getenv("INJECT_INTERVAL_MS", "500"))

# Transcript panel automation
PAGE_SETTLE_MS = int(os.getenv("PAGE_SETTLE_MS", "200"))
CLICK_SETTLE_MS = int(os.getenv("CLICK_SETTLE_MS", "250"))
PANEL_WAIT_ATTEMPTS = int(os.getenv("PANEL_WAIT_ATTEMPTS", "15"))
PANEL_WAIT_INTERVAL_MS = int(os.getenv("PANEL_WAIT_INTERVAL_MS", "200"))

# Caption feed
CAPTION_FETCH_TIMEOUT = float(os.getenv("CAPTION_FETCH_TIMEOUT", "10.0"))  # per-request
CAPTION_FETCH_RETRIES = int(os.getenv("CAPTION_FETCH_RETRIES", "0"))

# Notices
TOAST_DURATION_MS = int(os.getenv("TOAST_DURATION_MS", "2200"))

# Browser
BROWSER_HEADLESS = _env_flag("BROWSER_HEADLESS", "true")
BROWSER_CHANNEL = os.getenv("BROWSER_CHANNEL", "")
PAGE_LOAD_TIMEOUT_MS = int(os.getenv("PAGE_LOAD_TIMEOUT_MS", "60000"))
START_URL = os.getenv("START_URL", "https://www.youtube.com/")
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36",
)

REDIS_URL = os.getenv("REDIS_URL")
LOG_FILE = os.getenv("LOG_FILE", "ytprompt.log")

# Configure logging
logging.basicConfig(
    filename=LOG_FILE,            # log file name
    filemode="a",                 # append mode
    format="%(asctime)s [%(levelname)s] %(message)s",
    level=logging.INFO            # minimum level to log
)
logging.captureWarnings(True)
