import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
MODEL_NAME = os.getenv("DOCU_MODEL", "claude-sonnet-4-5")
MAX_TOKENS = int(os.getenv("DOCU_MAX_TOKENS", "4096"))

# "auto" needs an API key, "offline" forces fallback mode, "online" assumes the backend is reachable
FORCE_MODE = os.getenv("DOCU_OFFLINE_MODE", "auto").lower()
MAX_RETRIES = max(0, min(10, int(os.getenv("DOCU_MAX_RETRIES", "3"))))

WORKSPACE_DIR = Path(os.getenv("DOCU_WORKSPACE", str(Path.home() / "Documents" / "docu-workspace")))
DEFAULT_DIRECTORY = os.getenv("DOCU_DEFAULT_DIRECTORY", "docs")

LOG_LEVEL = os.getenv("DOCU_LOG_LEVEL", "WARNING").upper()  # console only; the log file keeps DEBUG
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB
LOG_BACKUP_COUNT = 3

MAX_FOLLOWUPS = 3
OFFLINE_COMMANDS = ("new", "template", "help", "status")
CHAT_COMMAND = "chat"
MIN_ANSWER_LENGTH = 10  # Shorter answers produce no document update
