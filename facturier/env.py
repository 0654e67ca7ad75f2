from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

_LOADED = False


def load_env() -> None:
    global _LOADED
    if _LOADED:
        return
    _LOADED = True

    base_dir = Path(__file__).resolve().parent
    # Project root .env first, then one next to the package.
    candidates = [
        base_dir.parent / ".env",
        base_dir / ".env",
        Path.cwd() / ".env",
    ]

    seen: set[Path] = set()
    for path in candidates:
        if path in seen or not path.exists():
            continue
        seen.add(path)
        # Real environment variables win over .env values.
        load_dotenv(dotenv_path=path, override=False)
        if os.getenv("FACTURIER_DEBUG") == "1":
            logger.debug("env.loaded path=%s", path)
