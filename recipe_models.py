from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ScentProfile(str, Enum):
    CITRUS = "CITRUS"
    WOODY = "WOODY"
    FLORAL = "FLORAL"
    HERBAL = "HERBAL"


def _drop_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


@dataclass(frozen=True)
class Ingredient:
    """Read-only ingredient reference data served by the backend."""

    name: str
    viscosity: int
    scent_profile: ScentProfile
    stock_level: int
    cost_per_ml: float
    id: Optional[int] = None
    description: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Ingredient":
        return cls(
            id=data.get("id"),
            name=data["name"],
            viscosity=data.get("viscosity", 0),
            scent_profile=ScentProfile(data["scentProfile"]),
            stock_level=data.get("stockLevel", 0),
            cost_per_ml=float(data.get("costPerMl") or 0),
            description=data.get("description")
        )

    def to_payload(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "name": self.name,
            "viscosity": self.viscosity,
            "scentProfile": self.scent_profile.value,
            "stockLevel": self.stock_level,
            "costPerMl": self.cost_per_ml,
            "description": self.description
        })


@dataclass
class InfusionStep:
    """One timed phase of an infusion with its heat, scent and media settings."""

    name: str
    duration_seconds: int
    heat_intensity: int
    scent_dosage_ml: int
    step_order: int
    id: Optional[int] = None
    ingredient_id: Optional[int] = None
    ingredient_name: Optional[str] = None
    music_track_id: Optional[str] = None
    lighting_scene: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "InfusionStep":
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            duration_seconds=data.get("durationSeconds") or 0,
            heat_intensity=data.get("heatIntensity") or 0,
            scent_dosage_ml=data.get("scentDosageMl") or 0,
            ingredient_id=data.get("ingredientId"),
            ingredient_name=data.get("ingredientName"),
            music_track_id=data.get("musicTrackId"),
            lighting_scene=data.get("lightingScene"),
            step_order=data.get("stepOrder") or 0
        )

    def to_payload(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "name": self.name,
            "durationSeconds": self.duration_seconds,
            "heatIntensity": self.heat_intensity,
            "scentDosageMl": self.scent_dosage_ml,
            "ingredientId": self.ingredient_id,
            "ingredientName": self.ingredient_name,
            "musicTrackId": self.music_track_id,
            "lightingScene": self.lighting_scene,
            "stepOrder": self.step_order
        })


@dataclass
class InfusionRecipe:
    """A named, ordered sequence of infusion steps.

    ``total_duration`` and ``total_cost`` are computed by the backend and only
    populated on recipes it returns.
    """

    name: str
    id: Optional[int] = None
    description: Optional[str] = None
    theme: Optional[str] = None
    steps: List[InfusionStep] = field(default_factory=list)
    total_duration: Optional[int] = None
    total_cost: Optional[float] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "InfusionRecipe":
        steps = [InfusionStep.from_payload(s) for s in data.get("steps") or []]
        steps.sort(key=lambda s: s.step_order)
        total_cost = data.get("totalCost")
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            description=data.get("description"),
            theme=data.get("theme"),
            steps=steps,
            total_duration=data.get("totalDuration"),
            total_cost=float(total_cost) if total_cost is not None else None
        )

    def to_payload(self) -> Dict[str, Any]:
        payload = _drop_none({
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "theme": self.theme,
            "totalDuration": self.total_duration,
            "totalCost": self.total_cost
        })
        payload["steps"] = [step.to_payload() for step in self.steps]
        return payload
