"""Load recordings from disk or from already-decoded JSON."""

import json
from pathlib import Path
from typing import Any, Union

import structlog

from .models import Recording, RecordingFormatError

logger = structlog.get_logger()


def load_recording(source: Union[str, Path, dict, Any]) -> Recording:
    """Load a recording.

    Accepts a path to a JSON file, a JSON string, or a decoded dict. A
    wrapper object with a ``recording`` key (as returned by the API) is
    unwrapped.

    Raises:
        FileNotFoundError: If ``source`` is a path that does not exist
        RecordingFormatError: If the content is not a valid recording or
            the file is not UTF-8
        OSError: If an existing path cannot be read
    """
    data = source

    if isinstance(source, Path):
        data = _read_json(_read_file(source), str(source))
    elif isinstance(source, str):
        stripped = source.lstrip()
        if stripped.startswith("{"):
            data = _read_json(source, "<string>")
        else:
            path = Path(source)
            if not path.exists():
                raise FileNotFoundError(f"Recording file not found: {path}")
            data = _read_json(_read_file(path), str(path))

    if isinstance(data, dict) and "steps" not in data and isinstance(data.get("recording"), dict):
        data = data["recording"]

    recording = Recording.from_dict(data)
    logger.debug(
        "Recording loaded",
        name=recording.name,
        step_count=recording.step_count,
    )
    return recording


def _read_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise RecordingFormatError(f"Recording file {path} is not valid UTF-8: {e}") from e


def _read_json(text: str, origin: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise RecordingFormatError(f"Invalid JSON in {origin}: {e}") from e
