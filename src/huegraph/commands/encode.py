"""Builders for command payloads sent to /clip/v2/resource/{kind}/{id}.

Every builder takes an optional transition in ms which ends up as
``{"dynamics": {"duration": ms}}`` next to the capability payload.
"""

import math
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from huegraph.commands.base import (
    ColorCommand,
    ColorModel,
    ColorTemperatureCommand,
    ColorTemperatureModel,
    DimmingCommand,
    DimmingDeltaCommand,
    DimmingDeltaModel,
    DimmingModel,
    DynamicsModel,
    OnCommand,
    OnModel,
    RecallCommand,
    RecallModel,
    XYModel,
    to_payload,
)
from huegraph.commands.colors import lookup_xy

# Brightness value that stops a running dimming transition
STOP_DIMMING = -1


def _dynamics(transition: Optional[int]) -> Optional[DynamicsModel]:
    if transition is None:
        return None
    return DynamicsModel(duration=int(transition))


def with_transition(payload: dict, transition: Optional[int]) -> dict:
    """Merge a transition into an arbitrary payload (e.g. raw commands)."""
    if transition is None:
        return payload
    merged = dict(payload)
    merged["dynamics"] = _dynamics(transition).model_dump()
    return merged


def encode_on(on: bool, transition: Optional[int] = None) -> dict:
    return to_payload(OnCommand(on=OnModel(on=bool(on)), dynamics=_dynamics(transition)))


def encode_brightness(value: float, transition: Optional[int] = None) -> dict:
    if value == STOP_DIMMING:
        return to_payload(DimmingDeltaCommand(dimming_delta=DimmingDeltaModel(action="stop")))
    return to_payload(DimmingCommand(dimming=DimmingModel(brightness=value), dynamics=_dynamics(transition)))


def _xy_from(arg: Any) -> dict[str, float]:
    if isinstance(arg, str):
        return lookup_xy(arg)
    if isinstance(arg, Mapping) and "x" in arg and "y" in arg:
        return {"x": arg["x"], "y": arg["y"]}
    if isinstance(arg, Sequence) and len(arg) == 2:
        x, y = arg
        return {"x": x, "y": y}
    raise ValueError(f"color must be a palette name or an (x, y) pair, got {arg!r}")


def encode_color(arg: Any, transition: Optional[int] = None) -> dict:
    xy = XYModel(**_xy_from(arg))
    return to_payload(ColorCommand(color=ColorModel(xy=xy), dynamics=_dynamics(transition)))


def round_mirek(mirek: float) -> int:
    # half-up, also 2.5 -> 3 (round() würde auf 2 runden)
    return math.floor(mirek + 0.5)


def encode_temperature(mirek: float, transition: Optional[int] = None) -> dict:
    model = ColorTemperatureModel(mirek=round_mirek(mirek))
    return to_payload(ColorTemperatureCommand(color_temperature=model, dynamics=_dynamics(transition)))


def encode_recall(transition: Optional[int] = None) -> dict:
    # Übergang als top-level dynamics neben recall, nicht in recall verschachtelt
    return to_payload(RecallCommand(recall=RecallModel(action="active"), dynamics=_dynamics(transition)))
