from __future__ import annotations

import os
from pathlib import Path

OUTPUT_DIR_ENV = "CUTTINGSTOCK_OUTPUT_DIR"


def get_output_dir() -> str:
    env_dir = os.getenv(OUTPUT_DIR_ENV)
    if env_dir:
        return str(Path(env_dir).expanduser().resolve())
    return str((Path.cwd() / "data" / "solutions").resolve())


def ensure_output_dir(path: str | os.PathLike | None = None) -> str:
    directory = Path(path) if path is not None else Path(get_output_dir())
    directory.mkdir(parents=True, exist_ok=True)
    return str(directory)
