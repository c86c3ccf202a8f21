"""Small JSON file helpers."""

import contextlib
import json
import os
import uuid
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def write_json_atomic(path: Path, data: Any):
    """Write ``data`` next to ``path`` and rename it into place.

    Each writer gets its own temporary name, so concurrent writers of the
    same file never share one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        raise
