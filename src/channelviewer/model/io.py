"""
Input/Output Manager (HDF5)
Handles saving and loading the SessionState to .h5 files.

The session is a flat key/value mapping of primitive values (booleans,
doubles, integers, a path string and a metric identifier), stored as the
attributes of a 'session' group.
"""
import logging
import math
import os
from dataclasses import replace
from importlib.metadata import version, PackageNotFoundError
from typing import Any, Callable, Dict, Mapping, Optional

import h5py
import numpy as np

from channelviewer.config import ZOOM_MAX, ZOOM_MIN
from channelviewer.model.metrics import parse_metric
from channelviewer.model.state import SessionState

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("channelviewer")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# Decodes an image file into an (H, W, 3) uint8 array; raises ValueError/OSError on failure
ImageLoader = Callable[[str], np.ndarray]

_LAYER_KEYS: Dict[str, str] = {
    "show_background": "background",
    "show_obstacles": "obstacles",
    "show_channel": "channel",
    "show_radios": "radios",
    "show_activity": "activity",
    "show_arrow": "scale_arrow",
}

_TRANSFORM_KEYS = ("zoom_x", "zoom_y", "pan_x", "pan_y")

_FOOTPRINT_KEYS: Dict[str, str] = {
    "back_start_x": "x",
    "back_start_y": "y",
    "back_width": "width",
    "back_height": "height",
}


def _native(value: Any) -> Any:
    """HDF5 often returns numpy scalars or bytes, convert to native python."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if hasattr(value, "item"):
        return value.item()
    return value


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
        raise ValueError(f"Not a boolean: '{value}'")
    return bool(value)


def _parse_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Not a number: '{value}'")
    return float(value)


def _parse_finite(value: Any) -> float:
    number = _parse_float(value)
    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: '{value}'")
    return number


class SessionIO:

    @staticmethod
    def to_mapping(state: SessionState) -> Dict[str, Any]:
        """Flatten the persisted part of the session into primitive key/values."""
        mapping: Dict[str, Any] = {"controls_visible": state.controls_visible}

        for key in _TRANSFORM_KEYS:
            mapping[key] = float(getattr(state.transform, key))

        for key, attr in _LAYER_KEYS.items():
            mapping[key] = bool(getattr(state.layers, attr))

        mapping["vis_type"] = str(state.metric)

        if state.background_path is not None:
            mapping["background_image"] = state.background_path
            for key, attr in _FOOTPRINT_KEYS.items():
                mapping[key] = float(getattr(state.background_footprint, attr))

        mapping["resolution"] = int(state.resolution)
        return mapping

    @staticmethod
    def apply_mapping(
        state: SessionState,
        mapping: Mapping[str, Any],
        image_loader: Optional[ImageLoader] = None,
    ) -> None:
        """
        Apply persisted key/values onto an existing state.

        Missing keys keep their current values. Unknown keys and malformed
        values are logged and skipped. A background image that no longer
        resolves disables the background layer instead of failing the restore.
        """
        background_path: Optional[str] = None
        footprint = state.background_footprint

        for key, raw in mapping.items():
            value = _native(raw)
            try:
                if key == "controls_visible":
                    state.controls_visible = _parse_bool(value)
                elif key in _TRANSFORM_KEYS:
                    setattr(state.transform, key, _parse_finite(value))
                elif key in _LAYER_KEYS:
                    setattr(state.layers, _LAYER_KEYS[key], _parse_bool(value))
                elif key == "vis_type":
                    state.metric = parse_metric(str(value))
                elif key == "background_image":
                    background_path = str(value)
                elif key in _FOOTPRINT_KEYS:
                    footprint = replace(footprint, **{_FOOTPRINT_KEYS[key]: _parse_float(value)})
                elif key == "resolution":
                    state.set_resolution(int(value))
                else:
                    logger.warning(f"Unknown configuration value: {key}")
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed value for '{key}': {e}")

        SessionIO._normalize_zoom(state)
        state.background_footprint = footprint
        if background_path is not None:
            SessionIO._restore_background(state, background_path, image_loader)

    @staticmethod
    def _normalize_zoom(state: SessionState) -> None:
        """Zoom is uniform and within [ZOOM_MIN, ZOOM_MAX], whatever the file says."""
        t = state.transform
        zoom = min(ZOOM_MAX, max(ZOOM_MIN, t.zoom_y))
        if (t.zoom_x, t.zoom_y) != (zoom, zoom):
            logger.warning(f"Persisted zoom ({t.zoom_x}, {t.zoom_y}) adjusted to {zoom}.")
        t.zoom_x = t.zoom_y = zoom

    @staticmethod
    def _restore_background(state: SessionState, path: str, image_loader: Optional[ImageLoader]) -> None:
        state.background_path = path
        state.background_pixels = None

        if not os.path.exists(path):
            logger.warning(f"Background image '{path}' not found, disabling background layer.")
            state.layers.background = False
            return

        if image_loader is None:
            return

        try:
            state.background_pixels = image_loader(path)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load background image '{path}': {e}. Disabling background layer.")
            state.layers.background = False

    @staticmethod
    def save_session(state: SessionState, filepath: str) -> None:
        logger.info(f"Saving session to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                grp = f.create_group("session")
                for key, val in SessionIO.to_mapping(state).items():
                    grp.attrs[key] = val
            logger.info(f"Session saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save session: {e}")
            raise

    @staticmethod
    def load_session(
        state: SessionState,
        filepath: str,
        image_loader: Optional[ImageLoader] = None,
    ) -> None:
        logger.info(f"Loading session from: {filepath}")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        try:
            with h5py.File(filepath, "r") as f:
                if "session" not in f:
                    logger.warning(f"No session data in '{filepath}'.")
                    return
                mapping = {key: f["session"].attrs[key] for key in f["session"].attrs.keys()}

        except Exception as e:
            logger.exception(f"Failed to load session: {e}")
            raise

        SessionIO.apply_mapping(state, mapping, image_loader=image_loader)
        logger.info(f"Session loaded from: {filepath}")
