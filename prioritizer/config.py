import os
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Component weights for the default engine. They must sum to 1.0; the engine
# refuses to start otherwise.
WEIGHT_URGENCY = float(os.getenv("WEIGHT_URGENCY", 0.33))
WEIGHT_IMPORTANCE = float(os.getenv("WEIGHT_IMPORTANCE", 0.28))
WEIGHT_TIMING = float(os.getenv("WEIGHT_TIMING", 0.15))
WEIGHT_EFFORT = float(os.getenv("WEIGHT_EFFORT", 0.12))
WEIGHT_HISTORY = float(os.getenv("WEIGHT_HISTORY", 0.12))

URGENCY_WINDOW_HOURS = float(os.getenv("URGENCY_WINDOW_HOURS", 72))
MAX_EFFORT_MINUTES = float(os.getenv("MAX_EFFORT_MINUTES", 120))
POSTPONE_PENALTY_RATE = float(os.getenv("POSTPONE_PENALTY_RATE", 0.4))

# External task store (the Node backend that owns task persistence).
TASK_API_BASE_URL = os.getenv("TASK_API_BASE_URL", "http://localhost:3001/api")
TASK_API_TIMEOUT_SECONDS = float(os.getenv("TASK_API_TIMEOUT_SECONDS", 15))
# Optional: if the task store requires an API key or bearer token, set
# TASK_API_KEY. By default it's sent as an Authorization header with the
# 'Bearer ' prefix. Override the header name or prefix with
# TASK_API_KEY_HEADER and TASK_API_KEY_PREFIX. A forwarded Authorization
# header from the incoming request always takes precedence.
TASK_API_KEY = os.getenv("TASK_API_KEY")
TASK_API_KEY_HEADER = os.getenv("TASK_API_KEY_HEADER", "Authorization")
TASK_API_KEY_PREFIX = os.getenv("TASK_API_KEY_PREFIX", "Bearer ")
