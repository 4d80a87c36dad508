import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# Backend REST (equivalente a VITE_API_URL del front)
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:3000/api")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))

# Salida automática: no repetir dentro de esta ventana
AUTO_CLOSE_COOLDOWN_SECONDS = float(os.getenv("AUTO_CLOSE_COOLDOWN_SECONDS", "4"))
# watchPosition timeout
GPS_TIMEOUT_SECONDS = float(os.getenv("GPS_TIMEOUT_SECONDS", "15"))

MARK_LOCK_WAIT_SECONDS = float(os.getenv("MARK_LOCK_WAIT_SECONDS", "2"))
SESSION_IDLE_SECONDS = float(os.getenv("SESSION_IDLE_SECONDS", "28800"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
