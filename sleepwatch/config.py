from dotenv import load_dotenv
import os

load_dotenv()

TOKEN = os.getenv("BOT_TOKEN")
DB_URL = os.getenv("DB_URL", "sqlite:///./sleepwatch.db")

DEFAULT_CHECKUP_INTERVAL_MIN = int(os.getenv("DEFAULT_CHECKUP_INTERVAL_MIN", "10"))
DEFAULT_ALARM_INTERVAL_MIN = int(os.getenv("DEFAULT_ALARM_INTERVAL_MIN", "2"))

ALERT_SOUND_URL = os.getenv("ALERT_SOUND_URL", "https://www.soundjay.com/buttons/sounds/beep-07a.mp3")
WEB_PORT = int(os.getenv("WEB_PORT", "5000"))

# Upper bound for both intervals (one week)
MAX_INTERVAL_MIN = int(os.getenv("MAX_INTERVAL_MIN", str(7 * 24 * 60)))
