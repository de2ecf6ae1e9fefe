"""Entity store sync.

GardenSync keeps four always-current, ordered views of the shared garden
and issues the mutations that move entities between collections.

VIEWS (push-based, replayed from empty on every connect):
- seeds       ordered by createdAt, newest first
- plants      ordered by plantedAt, oldest first
- memories    ordered by harvestedAt, newest first
- settings    the singleton at settings/global (defaults until written)
Comments are not live: ``list_comments`` reads them on demand, newest first.

MUTATIONS:
- create_seed(...)        validated against the configured duration limits
- plant(seed, position)   create Plant, then delete Seed
- water(plant_id)         bump lastWateredAt; a vanished plant is a no-op
- uproot(plant)           delete Plant, no Memory
- harvest(plant)          create Memory, then delete Plant; returns the Memory
- set_weather(value)      overwrite settings, last writer wins
- add_comment / delete_comment

MOVE SEMANTICS:
Two-step moves are create-then-delete. A failure between the steps leaves
a duplicate (a Plant next to its Seed, a Memory next to its Plant), never
a loss. plant() and harvest() are therefore not idempotent: two clients
harvesting the same Plant may both create a Memory. That is accepted and
logged, not deduplicated.

VIEW CONSISTENCY:
Views change only when the store pushes a snapshot. A failed mutation
raises to the caller and leaves every view untouched. Across collections
there is no ordering guarantee: a just-harvested Plant may still be in
``plants`` when its Memory shows up in ``memories``.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, TypeVar

from .admin import create_seed
from .config import (
    MAX_COMMENT_LENGTH,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    Settings,
    configure_logging,
    get_settings,
)
from .core import growth
from .core.canvas import DEFAULT_CANVAS, Canvas, CanvasPoint
from .core.lifecycle import (
    Comment,
    GardenSettings,
    Memory,
    Plant,
    Seed,
    plant_to_memory,
    plant_to_void,
    seed_to_plant,
)
from .core.types import Position, SeedColor, Timestamp, Weather
from .exceptions import ResourceNotFound, ValidationError
from .host.time import Clock, now_utc
from .settings_record import SettingsRecord
from .store.base import Document, DocumentStore, OrderBy, Snapshot, Subscription
from .store.sqlite import get_store

logger = logging.getLogger(__name__)

SEEDS = "seeds"
PLANTS = "plants"
MEMORIES = "memories"

SEEDS_ORDER = OrderBy("createdAt", descending=True)
PLANTS_ORDER = OrderBy("plantedAt")
MEMORIES_ORDER = OrderBy("harvestedAt", descending=True)
COMMENTS_ORDER = OrderBy("createdAt", descending=True)

ChangeListener = Callable[[str], None]
T = TypeVar("T")


def comments_path(memory_id: str) -> str:
    return f"{MEMORIES}/{memory_id}/comments"


@dataclass(frozen=True)
class PlantStatus:
    """Everything the presentation needs about a plant at one instant."""

    plant: Plant
    stage: growth.GrowthStage
    progress: int
    hydration: int
    remaining: growth.TimeRemaining
    countdown: str
    point: CanvasPoint

    @property
    def needs_water(self) -> bool:
        return growth.needs_water(self.hydration)

    @property
    def is_parched(self) -> bool:
        return growth.is_parched(self.hydration)


def plant_status(plant: Plant, now: datetime, canvas: Canvas = DEFAULT_CANVAS) -> PlantStatus:
    """Derive a plant's display state at ``now``."""
    remaining = plant.time_remaining(now)
    return PlantStatus(
        plant=plant,
        stage=plant.growth_stage(now),
        progress=plant.progress_percent(now),
        hydration=plant.hydration(now),
        remaining=remaining,
        countdown=growth.format_countdown(remaining),
        point=plant.normalized_position(canvas),
    )


class GardenSync:
    """Live, ordered views of the shared garden plus its mutations.

    Usage:
        with GardenSync(store) as garden:
            seed = garden.seeds[0]
            plant = garden.plant(seed, Position(250, 600, canvas=3))
            garden.water(plant.id)
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Clock = now_utc,
        canvas: Canvas = DEFAULT_CANVAS,
        max_comment_length: int = MAX_COMMENT_LENGTH,
        min_duration_minutes: int = MIN_DURATION_MINUTES,
        max_duration_minutes: int = MAX_DURATION_MINUTES,
    ):
        """Initialize the sync layer. Call ``connect()`` to start receiving snapshots.

        Args:
            store: Document store shared with the other clients
            clock: Source of "now" for stamping mutations
            canvas: Current canvas geometry, used for derived positions
            max_comment_length: Comments are capped to this many characters
            min_duration_minutes: Shortest growth period accepted by create_seed
            max_duration_minutes: Longest growth period accepted by create_seed
        """
        self._store = store
        self._clock = clock
        self.canvas = canvas
        self.max_comment_length = max_comment_length
        self.min_duration_minutes = min_duration_minutes
        self.max_duration_minutes = max_duration_minutes
        self.settings_record = SettingsRecord(store, clock)

        self._seeds: tuple[Seed, ...] = ()
        self._plants: tuple[Plant, ...] = ()
        self._memories: tuple[Memory, ...] = ()
        self._settings = GardenSettings()
        self._loading = True

        self._subscriptions: list[Subscription] = []
        self._listeners: list[ChangeListener] = []

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: DocumentStore | None = None,
        clock: Clock = now_utc,
    ) -> "GardenSync":
        """Build a GardenSync from loaded configuration.

        Args:
            settings: Loaded settings (canvas, comment and duration limits)
            store: Store to sync with. If None, the SQLite store at
                ``settings.store_path`` is opened.
            clock: Source of "now"
        """
        return cls(
            store if store is not None else get_store(settings.store_path),
            clock=clock,
            canvas=settings.canvas,
            max_comment_length=settings.max_comment_length,
            min_duration_minutes=settings.min_duration_minutes,
            max_duration_minutes=settings.max_duration_minutes,
        )

    # ==========================================================================
    # CONNECTION
    # ==========================================================================

    @property
    def connected(self) -> bool:
        return bool(self._subscriptions)

    def connect(self) -> None:
        """Subscribe to the shared collections.

        Views are reset first, so a reconnect replays from empty state.
        """
        if self.connected:
            return
        self._seeds, self._plants, self._memories = (), (), ()
        self._settings = GardenSettings()
        self._loading = True

        self._subscriptions = [
            self._store.subscribe(SEEDS, SEEDS_ORDER, self._on_seeds),
            self._store.subscribe(PLANTS, PLANTS_ORDER, self._on_plants),
            self._store.subscribe(MEMORIES, MEMORIES_ORDER, self._on_memories),
            self.settings_record.watch(self._on_settings),
        ]
        logger.debug("Garden connected")

    def disconnect(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []
        logger.debug("Garden disconnected")

    def __enter__(self) -> "GardenSync":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def on_change(self, listener: ChangeListener) -> Subscription:
        """Call ``listener(view_name)`` whenever a view is replaced.

        ``view_name`` is one of 'seeds', 'plants', 'memories', 'settings'.
        """
        self._listeners.append(listener)

        def cancel():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return Subscription(cancel)

    # ==========================================================================
    # VIEWS
    # ==========================================================================

    @property
    def seeds(self) -> tuple[Seed, ...]:
        return self._seeds

    @property
    def plants(self) -> tuple[Plant, ...]:
        return self._plants

    @property
    def memories(self) -> tuple[Memory, ...]:
        return self._memories

    @property
    def settings(self) -> GardenSettings:
        return self._settings

    @property
    def loading(self) -> bool:
        """True until the first plants snapshot arrives."""
        return self._loading

    def now(self) -> datetime:
        return self._clock()

    def find_seed(self, seed_id: str) -> Seed | None:
        return next((s for s in self._seeds if s.id == seed_id), None)

    def find_plant(self, plant_id: str) -> Plant | None:
        return next((p for p in self._plants if p.id == plant_id), None)

    def plant_statuses(self, now: datetime | None = None) -> list[PlantStatus]:
        """Derived state of every plant at ``now``, in planting order."""
        now = now or self.now()
        return [plant_status(plant, now, self.canvas) for plant in self._plants]

    # ==========================================================================
    # SNAPSHOT HANDLERS
    # ==========================================================================

    @staticmethod
    def _parse(
        snapshot: Snapshot,
        parse: Callable[[str, dict[str, Any]], T],
    ) -> tuple[T, ...]:
        records = []
        for document in snapshot:
            try:
                records.append(parse(document.id, document.data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed document %s/%s: %s", snapshot.path, document.id, e)
        return tuple(records)

    def _emit(self, view: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("Change listener failed for %s", view)

    def _on_seeds(self, snapshot: Snapshot) -> None:
        self._seeds = self._parse(snapshot, Seed.from_document)
        self._emit(SEEDS)

    def _on_plants(self, snapshot: Snapshot) -> None:
        self._plants = self._parse(snapshot, Plant.from_document)
        self._loading = False
        self._emit(PLANTS)

    def _on_memories(self, snapshot: Snapshot) -> None:
        self._memories = self._parse(snapshot, Memory.from_document)
        self._emit(MEMORIES)

    def _on_settings(self, settings: GardenSettings) -> None:
        self._settings = settings
        self._emit("settings")

    # ==========================================================================
    # MUTATIONS
    # ==========================================================================

    def create_seed(self, message: str, duration_minutes: int, color: SeedColor | str) -> Seed:
        """Create a Seed within this garden's duration limits.

        Raises:
            ValidationError: If any parameter is out of range
        """
        return create_seed(
            self._store,
            message,
            duration_minutes,
            color,
            now=self._clock(),
            min_duration=self.min_duration_minutes,
            max_duration=self.max_duration_minutes,
        )

    def plant(self, seed: Seed, position: Position | dict[str, Any]) -> Plant:
        """Move ``seed`` into the garden at ``position``.

        The position is stored as given; it is only normalized on read.

        Args:
            seed: Seed to consume
            position: Where the plant goes

        Returns:
            The created Plant, with its store-assigned id

        Raises:
            TransitionError: If ``seed`` is not a Seed
            ValidationError: If ``seed`` was never stored
            TransientStoreError: If either store step fails
        """
        if isinstance(seed, Seed) and not seed.id:
            raise ValidationError("Seed has not been stored yet")
        if isinstance(position, dict):
            position = Position.from_dict(position)

        plant = seed_to_plant(seed, position, self._clock())
        plant_id = self._store.create(PLANTS, plant.to_fields())
        try:
            existed = self._store.delete(f"{SEEDS}/{seed.id}")
        except Exception:
            logger.warning("Planted %s but could not remove seed %s; seed is duplicated", plant_id, seed.id)
            raise
        if not existed:
            logger.warning("Seed %s was already consumed; plant %s is a duplicate", seed.id, plant_id)

        logger.info("Planted seed %s as plant %s", seed.id, plant_id)
        return replace(plant, id=plant_id)

    def water(self, plant_id: str) -> bool:
        """Reset a plant's hydration clock.

        Returns:
            True if the plant was watered, False if it no longer exists
        """
        try:
            self._store.update(
                f"{PLANTS}/{plant_id}",
                {"lastWateredAt": str(Timestamp.from_datetime(self._clock()))},
            )
        except ResourceNotFound:
            logger.debug("Plant %s is gone, nothing to water", plant_id)
            return False
        logger.info("Watered plant %s", plant_id)
        return True

    def uproot(self, plant: Plant | str) -> bool:
        """Remove a plant without leaving a Memory. Irreversible.

        Args:
            plant: Plant record or plant id

        Returns:
            True if the plant was removed, False if it was already gone
        """
        plant_id = plant if isinstance(plant, str) else plant_to_void(plant)
        existed = self._store.delete(f"{PLANTS}/{plant_id}")
        if existed:
            logger.info("Uprooted plant %s", plant_id)
        else:
            logger.debug("Plant %s was already gone", plant_id)
        return existed

    def harvest(self, plant: Plant) -> Memory:
        """Turn ``plant`` into a Memory.

        The Memory is returned directly so the caller can show it without
        waiting for the next memories snapshot.

        Raises:
            TransitionError: If ``plant`` is not a Plant
            TransientStoreError: If either store step fails
        """
        memory = plant_to_memory(plant, self._clock())
        if not plant.id:
            raise ValidationError("Plant has not been stored yet")
        memory_id = self._store.create(MEMORIES, memory.to_fields())
        try:
            existed = self._store.delete(f"{PLANTS}/{plant.id}")
        except Exception:
            logger.warning("Harvested %s into memory %s but could not remove the plant", plant.id, memory_id)
            raise
        if not existed:
            logger.warning("Plant %s was already harvested; memory %s is a second copy", plant.id, memory_id)

        logger.info("Harvested plant %s into memory %s", plant.id, memory_id)
        return replace(memory, id=memory_id)

    def set_weather(self, weather: Weather | str) -> GardenSettings:
        return self.settings_record.set(weather)

    # ==========================================================================
    # COMMENTS
    # ==========================================================================

    def list_comments(self, memory_id: str) -> list[Comment]:
        """Comments on a memory, newest first."""
        documents: Iterable[Document] = self._store.query_once(comments_path(memory_id), COMMENTS_ORDER)
        comments = []
        for document in documents:
            try:
                comments.append(Comment.from_document(document.id, memory_id, document.data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed comment %s on %s: %s", document.id, memory_id, e)
        return comments

    def add_comment(self, memory_id: str, text: str) -> Comment:
        """Add a comment to a memory.

        The text is trimmed and capped at ``max_comment_length`` characters.

        Raises:
            ValidationError: If the text is empty after trimming
            ResourceNotFound: If the memory does not exist
        """
        text = (text or "").strip()[: self.max_comment_length].strip()
        if not text:
            raise ValidationError("Comment cannot be empty")
        if self._store.get(f"{MEMORIES}/{memory_id}") is None:
            raise ResourceNotFound(f"Memory '{memory_id}' not found", {"memory_id": memory_id})

        comment = Comment(
            id=None,
            memory_id=memory_id,
            text=text,
            created_at=Timestamp.from_datetime(self._clock()),
        )
        comment_id = self._store.create(comments_path(memory_id), comment.to_fields())
        logger.info("Added comment %s to memory %s", comment_id, memory_id)
        return replace(comment, id=comment_id)

    def delete_comment(self, memory_id: str, comment_id: str) -> bool:
        """Delete one comment. Deleting a missing comment is a no-op.

        Returns:
            True if the comment existed
        """
        existed = self._store.delete(f"{comments_path(memory_id)}/{comment_id}")
        if existed:
            logger.info("Deleted comment %s from memory %s", comment_id, memory_id)
        return existed


def open_garden(config_path: Path | None = None, clock: Clock = now_utc) -> GardenSync:
    """Load configuration, apply its log level and connect to the configured store.

    Args:
        config_path: Optional explicit config.toml; resolved as in ``Settings``
        clock: Source of "now"

    Returns:
        A connected GardenSync over the SQLite store at ``settings.store_path``
    """
    settings = get_settings(config_path)
    configure_logging(settings)
    garden = GardenSync.from_settings(settings, clock=clock)
    garden.connect()
    logger.info("Opened garden at %s", settings.store_path)
    return garden
