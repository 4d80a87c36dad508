SECRET_KEY = "test-secret"

API_BASE_URL = "http://backend.test/api"
API_TIMEOUT_SECONDS = 2.0

AUTO_CLOSE_COOLDOWN_SECONDS = 4.0
GPS_TIMEOUT_SECONDS = 15.0
MARK_LOCK_WAIT_SECONDS = 2.0
SESSION_IDLE_SECONDS = 3600.0

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
