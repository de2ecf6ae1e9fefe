"""Lifecycle records and transitions.

A message lives in exactly one of three collections at a time:

    seeds --seed_to_plant--> plants --plant_to_memory--> memories
                                    \\--plant_to_void--> (gone)

Seed, Plant and Memory are variants of one tagged lifecycle type (each
record carries its ``stage``). The only way to move between variants is
through the transition functions below; any other edge raises
TransitionError instead of relying on collection membership.

DOCUMENT FORMAT:
Records map to store documents with camelCase field names
(``durationMinutes``, ``plantedAt``, ...). Document ids are not part of the
fields; they are assigned by the store on create.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Union

from ..exceptions import TransitionError
from . import growth
from .canvas import DEFAULT_CANVAS, Canvas, CanvasPoint, normalize
from .types import Position, SeedColor, Timestamp, Weather

INITIAL_WATER_STREAK = 1


class LifecycleStage(str, Enum):
    SEED = "seed"
    PLANT = "plant"
    MEMORY = "memory"
    VOID = "void"


ALLOWED_TRANSITIONS = frozenset({
    (LifecycleStage.SEED, LifecycleStage.PLANT),
    (LifecycleStage.PLANT, LifecycleStage.MEMORY),
    (LifecycleStage.PLANT, LifecycleStage.VOID),
})


def check_transition(entity: Any, target: LifecycleStage) -> None:
    """Raise TransitionError unless ``entity`` may move to ``target``.

    Args:
        entity: Seed, Plant or Memory record
        target: Requested lifecycle stage

    Raises:
        TransitionError: If the edge is not part of the lifecycle
    """
    source = getattr(entity, "stage", None)
    if not isinstance(source, LifecycleStage):
        raise TransitionError(
            f"{type(entity).__name__} is not a lifecycle record",
            source=str(source),
            target=target.value,
        )
    if (source, target) not in ALLOWED_TRANSITIONS:
        raise TransitionError(
            f"Cannot move a {source.value} to {target.value}",
            source=source.value,
            target=target.value,
        )


@dataclass(frozen=True)
class Seed:
    """An unplanted, time-delayed message."""

    stage: ClassVar[LifecycleStage] = LifecycleStage.SEED

    id: str | None
    message: str
    duration_minutes: int
    color: SeedColor
    created_at: Timestamp

    def to_fields(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "durationMinutes": self.duration_minutes,
            "color": self.color.value,
            "createdAt": str(self.created_at),
        }

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Seed":
        return cls(
            id=doc_id,
            message=data["message"],
            duration_minutes=int(data["durationMinutes"]),
            color=SeedColor(data["color"]),
            created_at=Timestamp(data["createdAt"]),
        )


@dataclass(frozen=True)
class Plant:
    """A placed, growing seed.

    ``position`` is written once at planting and never mutated; only its
    interpretation (``normalized_position``) follows the canvas.
    """

    stage: ClassVar[LifecycleStage] = LifecycleStage.PLANT

    id: str | None
    seed_id: str
    message: str
    color: SeedColor
    duration_minutes: int
    position: Position
    planted_at: Timestamp
    last_watered_at: Timestamp
    water_streak: int = INITIAL_WATER_STREAK

    def to_fields(self) -> dict[str, Any]:
        return {
            "seedId": self.seed_id,
            "message": self.message,
            "color": self.color.value,
            "durationMinutes": self.duration_minutes,
            "position": self.position.to_dict(),
            "plantedAt": str(self.planted_at),
            "lastWateredAt": str(self.last_watered_at),
            "waterStreak": self.water_streak,
        }

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Plant":
        return cls(
            id=doc_id,
            seed_id=data.get("seedId", ""),
            message=data["message"],
            color=SeedColor(data["color"]),
            duration_minutes=int(data["durationMinutes"]),
            position=Position.from_dict(data["position"]),
            planted_at=Timestamp(data["plantedAt"]),
            last_watered_at=Timestamp(data.get("lastWateredAt", data["plantedAt"])),
            water_streak=int(data.get("waterStreak", INITIAL_WATER_STREAK)),
        )

    def growth_stage(self, now: datetime) -> growth.GrowthStage:
        return growth.growth_stage(self.planted_at, self.duration_minutes, now)

    def progress_percent(self, now: datetime) -> int:
        return growth.progress_percent(self.planted_at, self.duration_minutes, now)

    def hydration(self, now: datetime) -> int:
        return growth.hydration(self.last_watered_at, now)

    def time_remaining(self, now: datetime) -> growth.TimeRemaining:
        return growth.time_remaining(self.planted_at, self.duration_minutes, now)

    def is_ready(self, now: datetime) -> bool:
        return self.growth_stage(now) is growth.GrowthStage.READY

    def normalized_position(self, canvas: Canvas = DEFAULT_CANVAS) -> CanvasPoint:
        return normalize(self.position, canvas)


@dataclass(frozen=True)
class Memory:
    """The permanent record left after a Plant is harvested."""

    stage: ClassVar[LifecycleStage] = LifecycleStage.MEMORY

    id: str | None
    message: str
    color: SeedColor
    planted_at: Timestamp
    harvested_at: Timestamp
    duration_minutes: int
    position: Position

    def to_fields(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "color": self.color.value,
            "plantedAt": str(self.planted_at),
            "harvestedAt": str(self.harvested_at),
            "durationMinutes": self.duration_minutes,
            "position": self.position.to_dict(),
        }

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Memory":
        return cls(
            id=doc_id,
            message=data["message"],
            color=SeedColor(data["color"]),
            planted_at=Timestamp(data["plantedAt"]),
            harvested_at=Timestamp(data["harvestedAt"]),
            duration_minutes=int(data["durationMinutes"]),
            position=Position.from_dict(data["position"]),
        )


@dataclass(frozen=True)
class Comment:
    """A note left on a Memory. Owned by exactly one Memory."""

    id: str | None
    memory_id: str
    text: str
    created_at: Timestamp

    def to_fields(self) -> dict[str, Any]:
        # memory_id is implied by the collection path
        return {"text": self.text, "createdAt": str(self.created_at)}

    @classmethod
    def from_document(cls, doc_id: str, memory_id: str, data: dict[str, Any]) -> "Comment":
        return cls(
            id=doc_id,
            memory_id=memory_id,
            text=data["text"],
            created_at=Timestamp(data["createdAt"]),
        )


@dataclass(frozen=True)
class GardenSettings:
    """Shared garden settings singleton.

    ``version`` counts writes; it is informational only, since the last
    writer wins without any compare-and-set.
    """

    weather: Weather = Weather.SUNNY
    last_updated: Timestamp | None = None
    version: int = 0

    def to_fields(self) -> dict[str, Any]:
        return {
            "weather": self.weather.value,
            "lastUpdated": str(self.last_updated) if self.last_updated else None,
            "version": self.version,
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "GardenSettings":
        last_updated = data.get("lastUpdated")
        return cls(
            weather=Weather(data.get("weather", Weather.SUNNY.value)),
            last_updated=Timestamp(last_updated) if last_updated else None,
            version=int(data.get("version", 0)),
        )


LifecycleRecord = Union[Seed, Plant, Memory]


# ============================================================================
# TRANSITIONS
# ============================================================================

def seed_to_plant(seed: Seed, position: Position, now: datetime) -> Plant:
    """Build the Plant that consumes ``seed``.

    The Plant is planted and watered at ``now`` with a streak of 1, and
    carries message, color and duration from the seed unchanged.

    Raises:
        TransitionError: If ``seed`` is not a Seed
    """
    check_transition(seed, LifecycleStage.PLANT)
    planted_at = Timestamp.from_datetime(now)
    return Plant(
        id=None,
        seed_id=seed.id or "",
        message=seed.message,
        color=seed.color,
        duration_minutes=seed.duration_minutes,
        position=position,
        planted_at=planted_at,
        last_watered_at=planted_at,
        water_streak=INITIAL_WATER_STREAK,
    )


def plant_to_memory(plant: Plant, now: datetime) -> Memory:
    """Build the Memory left by harvesting ``plant`` at ``now``.

    Raises:
        TransitionError: If ``plant`` is not a Plant
    """
    check_transition(plant, LifecycleStage.MEMORY)
    return Memory(
        id=None,
        message=plant.message,
        color=plant.color,
        planted_at=plant.planted_at,
        harvested_at=Timestamp.from_datetime(now),
        duration_minutes=plant.duration_minutes,
        position=plant.position,
    )


def plant_to_void(plant: Plant) -> str:
    """Check that ``plant`` may be uprooted and return its id.

    Raises:
        TransitionError: If ``plant`` is not a Plant
        ValueError: If the plant has no id yet
    """
    check_transition(plant, LifecycleStage.VOID)
    if not plant.id:
        raise ValueError("Cannot uproot a plant that was never stored")
    return plant.id

