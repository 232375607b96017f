from pathlib import Path

LOG_DIR = Path(__file__).parent / "logs"

LOG_FILE = LOG_DIR / "session.jsonl"
APP_NAME = "UF2 CLI"
