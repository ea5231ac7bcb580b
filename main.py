from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from interface.api import app  # noqa: E402,F401
from interface.cli import main as cli_main  # noqa: E402

if __name__ == "__main__":
    sys.exit(cli_main())
