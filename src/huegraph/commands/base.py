from typing import Literal, Optional

from pydantic import BaseModel, Field


class DynamicsModel(BaseModel):
    duration: int = Field(..., ge=0)  # ms


class OnModel(BaseModel):
    on: bool


class OnCommand(BaseModel):
    on: OnModel
    dynamics: Optional[DynamicsModel] = None


class DimmingModel(BaseModel):
    brightness: float = Field(..., ge=0.0, le=100.0)


class DimmingCommand(BaseModel):
    dimming: DimmingModel
    dynamics: Optional[DynamicsModel] = None


class DimmingDeltaModel(BaseModel):
    action: Literal["up", "down", "stop"]
    brightness_delta: Optional[float] = Field(None, ge=0.0, le=100.0)


class DimmingDeltaCommand(BaseModel):
    dimming_delta: DimmingDeltaModel


class ColorTemperatureModel(BaseModel):
    mirek: int = Field(..., ge=50, le=1000)


class ColorTemperatureCommand(BaseModel):
    color_temperature: ColorTemperatureModel
    dynamics: Optional[DynamicsModel] = None


# Das innerste Objekt
class XYModel(BaseModel):
    x: float = Field(..., ge=0.0, le=1.0)
    y: float = Field(..., ge=0.0, le=1.0)


# Das "mittlere" Objekt
class ColorModel(BaseModel):
    xy: XYModel


# Das "äußere" Päckchen
class ColorCommand(BaseModel):
    color: ColorModel
    dynamics: Optional[DynamicsModel] = None


class RecallModel(BaseModel):
    action: Literal["active", "dynamic_palette", "static"] = "active"


class RecallCommand(BaseModel):
    recall: RecallModel
    dynamics: Optional[DynamicsModel] = None


def to_payload(command: BaseModel) -> dict:
    """Wire form of a command, without unset optional parts."""
    return command.model_dump(exclude_none=True)
