"""loading.py - Frame Ingestion from JSON Scenario Files

A scenario is a directory of JSON files, one frame per file::

    {
        "child_frame_id": "camera",
        "parent_frame_id": "base",
        "transform": {
            "translation": {"x": 0.1, "y": 0.0, "z": 0.5},
            "rotation": {"x": 0.0, "y": 0.0, "z": 0.0, "w": 1.0}
        },
        "json_metadata": "{\\"model\\": \\"d435\\"}"
    }

Malformed records are skipped with a warning, they never abort a scenario.
"""
from __future__ import annotations

import typing as typ

import json
import logging
import time
from pathlib import Path

import numpy as np

from space_tree.frame import Frame
from space_tree.geometry import RigidTransform

if typ.TYPE_CHECKING:
    from space_tree.buffer import FrameBuffer

__all__ = ['list_frames_in_dir', 'load_json_file', 'transform_from_json',
           'parse_frame', 'load_scenario', 'load_frames_from_dir']

logger = logging.getLogger(__name__)

TRANSLATION_KEYS = ('x', 'y', 'z')
ROTATION_KEYS = ('x', 'y', 'z', 'w')

# %% Files
def list_frames_in_dir(path: str | Path) -> list[str]:
    """Lists the JSON frame files of a scenario directory

    :param path: Scenario directory
    :type path: str | pathlib.Path

    :return: Sorted file paths, empty when the directory cannot be read
    :rtype: list[str]
    """
    try:
        entries = sorted(Path(path).iterdir())
    except OSError as e:
        logger.warning("Reading the scenario directory failed with: '%s'. "
                       "Empty scenario is loaded.", e)
        return []

    return [str(entry) for entry in entries if entry.suffix == '.json' and entry.is_file()]

def load_json_file(path: str | Path) -> dict | None:
    """Reads one JSON object from a file

    :param path: File path
    :type path: str | pathlib.Path

    :return: Decoded object, None when the file cannot be read or decoded
    :rtype: dict | None
    """
    try:
        with open(path, encoding='utf-8') as f:
            value = json.load(f)
    except OSError as e:
        logger.warning("Opening json file failed with: '%s'. Please check if the "
                       "file path is correct and you have sufficient permissions.", e)
        return None
    except (ValueError, RecursionError) as e:
        # ValueError covers json.JSONDecodeError and UnicodeDecodeError
        logger.warning("Deserialization of '%s' failed with: '%s'. The JSON file may "
                       "be malformed or contain unexpected data.", path, e)
        return None

    if not isinstance(value, dict):
        logger.warning("Expected a JSON object in '%s', got %s.", path, type(value).__name__)
        return None
    return value

# %% Records
def _extract_string_field(record: dict, field: str) -> str | None:
    value = record.get(field)
    if not isinstance(value, str):
        logger.warning("Invalid or missing '%s'. Ensure the '%s' field is present "
                       "and is a valid string.", field, field)
        return None
    return value

def _extract_components(value: typ.Any, keys: tuple[str, ...]) -> list[float]:
    if not isinstance(value, dict):
        raise ValueError(f"expected an object with keys {list(keys)}")

    components = []
    for key in keys:
        component = value.get(key)
        # bool is an int subclass but never a coordinate
        if isinstance(component, bool) or not isinstance(component, (int, float)):
            raise ValueError(f"'{key}' must be a number, got {component!r}")
        try:
            component = float(component)
        except OverflowError:
            raise ValueError(f"'{key}' is out of range") from None
        if not np.isfinite(component):
            raise ValueError(f"'{key}' must be finite, got {component!r}")
        components.append(component)
    return components

def transform_from_json(value: typ.Any) -> RigidTransform | None:
    """Converts a JSON transform object into a rigid transform

    :param value: Object with 'translation' {x,y,z} and 'rotation' {x,y,z,w} members
    :type value: typing.Any

    :return: Rigid transform, None when the object is malformed
    :rtype: RigidTransform | None
    """
    if not isinstance(value, dict):
        logger.warning("Missing 'transform' field. Ensure the 'transform' field "
                       "is present in the JSON.")
        return None

    try:
        translation = _extract_components(value.get('translation'), TRANSLATION_KEYS)
        quaternion = _extract_components(value.get('rotation'), ROTATION_KEYS)
        return RigidTransform.from_quaternion(quaternion, translation)
    except ValueError as e:
        logger.warning("Failed to deserialize 'transform' field: '%s'. Ensure the "
                       "'transform' field is correctly formatted.", e)
        return None

def parse_frame(record: dict, now: float | None = None) -> Frame | None:
    """Builds a frame from a decoded scenario record

    :param record: Decoded JSON record
    :type record: dict

    :param now: Freshness timestamp, defaults to :code:`time.monotonic()`
    :type now: float | None, optional

    :return: Frame, None when a required field is missing or malformed
    :rtype: Frame | None
    """
    name = _extract_string_field(record, 'child_frame_id')
    if name is None:
        return None

    parent_name = _extract_string_field(record, 'parent_frame_id')
    if parent_name is None:
        return None

    transform = transform_from_json(record.get('transform'))
    if transform is None:
        return None

    metadata = record.get('json_metadata', '')
    if not isinstance(metadata, str):
        logger.warning("Ignoring non-string 'json_metadata' of frame '%s'.", name)
        metadata = ''

    return Frame(name, parent_name, transform,
                 time.monotonic() if now is None else now, metadata)

# %% Scenarios
def load_scenario(paths: typ.Iterable[str | Path]) -> dict[str, Frame]:
    """Loads the frames of a list of files, later files win on duplicate names

    :param paths: Frame file paths
    :type paths: typing.Iterable[str | pathlib.Path]

    :return: Frame name to frame mapping
    :rtype: dict[str, Frame]
    """
    frames = {}
    for path in paths:
        record = load_json_file(path)
        if record is None:
            continue

        frame = parse_frame(record)
        if frame is None:
            logger.warning("Skipping malformed frame file '%s'.", path)
            continue

        frames[frame.name] = frame

    return frames

def load_frames_from_dir(path: str | Path, buffer: FrameBuffer) -> int:
    """Loads a scenario directory into a buffer

    :param path: Scenario directory
    :type path: str | pathlib.Path

    :param buffer: Destination buffer
    :type buffer: FrameBuffer

    :return: Number of frames handed to the buffer
    :rtype: int
    """
    frames = load_scenario(list_frames_in_dir(path))
    buffer.insert_or_update(frames.values())
    logger.info("Loaded %d frame(s) from '%s'.", len(frames), path)
    return len(frames)
