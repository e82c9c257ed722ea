"""Resolve Docker-style ``*_FILE`` secrets into plain environment variables.

The fleet API key is usually mounted as a secret (``FLEET_API_KEY_FILE``);
settings only look at ``FLEET_API_KEY``, so the file content is copied over
before the settings are instantiated.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

_SUFFIX = "_FILE"


def _read_secret(key: str, file_path: str) -> Optional[str]:
    try:
        return Path(file_path).read_text(encoding="utf-8").strip()
    except FileNotFoundError as exc:
        event = "env.secret_file.missing"
        error = exc
    except UnicodeDecodeError as exc:
        event = "env.secret_file.decode_failed"
        error = exc
    except OSError as exc:
        event = "env.secret_file.load_failed"
        error = exc
    logger.warning(event, extra={"key": key, "path": file_path, "error": str(error)})
    return None


def load_secret_file_variables() -> List[str]:
    """
    Expose the content of every ``KEY_FILE`` entry as ``KEY``.

    Variables that are already set win over their file counterpart.
    Failures are logged and skipped.

    Returns:
        The names of the variables that were populated.
    """
    resolved: List[str] = []
    for key, file_path in list(os.environ.items()):
        if not key.endswith(_SUFFIX) or not file_path:
            continue
        target_key = key[: -len(_SUFFIX)]
        if os.environ.get(target_key):
            continue
        value = _read_secret(key, file_path)
        if value is None:
            continue
        os.environ[target_key] = value
        resolved.append(target_key)
    return resolved


load_secret_file_variables()
