"""Stable per-device user id sent with every request.

The id is derived from host traits on first use and cached in the project
data directory so it survives restarts.
"""

import hashlib
import logging
import platform
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent.parent.parent / "data"
_FINGERPRINT_FILE = _DATA_DIR / "fingerprint_id"


def generate_fingerprint_id() -> str:
    """Derive an id from traits that are stable for this machine."""
    traits = "|".join(
        [
            platform.node(),
            platform.system(),
            platform.machine(),
            f"{uuid.getnode():012x}",
        ]
    )
    return f"fp_{hashlib.sha256(traits.encode('utf-8')).hexdigest()[:32]}"


def get_stable_user_id(path: Path | None = None) -> str:
    """Return the cached user id, generating and caching one if needed.

    Args:
        path: Cache file location. Defaults to ``data/fingerprint_id``.

    Returns:
        The user id. Still returned when the cache cannot be written.
    """
    path = path or _FINGERPRINT_FILE
    try:
        existing = path.read_text(encoding="utf-8").strip()
        if existing:
            return existing
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not read fingerprint cache {path}: {e}")

    fingerprint = generate_fingerprint_id()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(fingerprint, encoding="utf-8")
    except OSError as e:
        logger.warning(f"Could not cache fingerprint at {path}: {e}")
    return fingerprint

