import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./app.db")

# schedule start/end times and dates are all expressed in this zone
QUIZ_TIMEZONE = os.getenv("QUIZ_TIMEZONE", "Asia/Seoul")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STARTING_ASSETS = 1_000_000
