import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

API_BASE_URL = os.getenv("API_BASE_URL", "https://api.geoasistencia.local/api")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))

AUTO_CLOSE_COOLDOWN_SECONDS = float(os.getenv("AUTO_CLOSE_COOLDOWN_SECONDS", "4"))
GPS_TIMEOUT_SECONDS = float(os.getenv("GPS_TIMEOUT_SECONDS", "15"))

MARK_LOCK_WAIT_SECONDS = float(os.getenv("MARK_LOCK_WAIT_SECONDS", "2"))
SESSION_IDLE_SECONDS = float(os.getenv("SESSION_IDLE_SECONDS", "28800"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
