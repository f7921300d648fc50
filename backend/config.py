import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '8080'))
    # Comma separated list, '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    STATIC_FOLDER = os.environ.get('STATIC_FOLDER', 'public')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Round settings (milliseconds)
    ROUND_DURATION_MS = int(os.environ.get('ROUND_DURATION_MS', '30000'))
    KEY_PRESS_COOLDOWN_MS = int(os.environ.get('KEY_PRESS_COOLDOWN_MS', '200'))
    # Must outlast the client's 5000ms end-of-round animation
    EVICTION_DELAY_MS = int(os.environ.get('EVICTION_DELAY_MS', '5500'))
    # Presses needed to burst the nut and win early. 0 disables.
    TARGET_PRESSES = int(os.environ.get('TARGET_PRESSES', '100'))
    # Optional: test hooks, see tests/conftest.py
    SESSION_SCHEDULER = None
    SESSION_CLOCK = None
