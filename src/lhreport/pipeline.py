"""
Pipeline orchestrator: load a result (JSON from the audit run), then run renderers.
All renderers write to output_dir (created if it does not exist).
"""

import json
import sys
from pathlib import Path
from typing import Callable

from .schema import Result, SCHEMA_VERSION


def load_result(path: Path) -> Result:
    """Load and validate an audit result from JSON."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    file_version = data.get("schema_version", 1)
    if isinstance(file_version, int) and file_version > SCHEMA_VERSION:
        print(
            f"WARNING: result was written for a newer lhreport (schema v{file_version}, "
            f"this tool supports v{SCHEMA_VERSION}). Some fields may be dropped.",
            file=sys.stderr,
        )
    return Result.model_validate(data)


def save_result(result: Result, path: Path) -> None:
    """Serialize result to JSON using the camelCase keys it was read with."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.model_dump_json(by_alias=True, indent=2), encoding="utf-8")


def run_pipeline(
    *,
    result_path: Path,
    output_dir: Path,
    run_renderers: Callable[[Result, Path], None],
) -> Result:
    """
    Load the result at result_path and hand it to run_renderers.

    Returns the loaded result.
    """
    result = load_result(result_path)
    output_dir.mkdir(parents=True, exist_ok=True)
    run_renderers(result, output_dir)
    return result
