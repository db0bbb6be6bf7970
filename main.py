# main.py
from dotenv import load_dotenv
from common.config import initialize_config, get_config
from common.api_error import ConfigurationError
from app.api import create_app

load_dotenv()
try:
    initialize_config()
except ConfigurationError as e:
    # Can't use logger yet, but that's OK - this is a fatal startup error
    print(f"FATAL: Configuration error:\n{e}")
    import sys

    sys.exit(1)

config = get_config()
app = create_app(config)

__all__ = ["app", "config"]
