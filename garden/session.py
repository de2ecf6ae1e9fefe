"""Per-client garden session state.

Ephemeral UI state that composes with the synchronized garden but is
never persisted; a new session (e.g. after reconnect) starts from defaults.

STATE:
- selected seed (at most one); a selection means "placement pending"
- interaction mode: exactly one of NONE, WATERING, UPROOTING
- cosmetic season and day/night toggles
- the harvest reveal currently shown, if any
- a staged uproot awaiting confirmation

TRANSITIONS:
    idle --select_seed--> placement pending
    placement pending --click_garden(in zone)--> plant() --> idle
    placement pending --click_garden(sky / off canvas)--> placement pending
Selecting one interaction mode clears the other.
"""

import logging
from datetime import datetime
from enum import Enum

from .core.canvas import CanvasPoint, clamp_to_planting_zone, is_plantable, to_position
from .core.growth import GrowthStage, needs_water
from .core.lifecycle import Memory, Plant, Seed
from .exceptions import GardenError
from .sync import GardenSync

logger = logging.getLogger(__name__)


class InteractionMode(str, Enum):
    NONE = "none"
    WATERING = "watering"
    UPROOTING = "uprooting"


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


SEASON_CYCLE = (Season.SPRING, Season.SUMMER, Season.FALL, Season.WINTER)
DEFAULT_SEASON = Season.SUMMER


class PlantAction(str, Enum):
    """What a click on a plant did."""

    NONE = "none"
    WATERED = "watered"
    HARVESTED = "harvested"
    UPROOT_STAGED = "uproot_staged"


class GardenSession:
    """Interaction state of one connected client.

    Mutations go through the shared ``GardenSync``; failures are caught
    here, recorded in ``last_error`` for display, and leave the session in
    the state it was in before the action.
    """

    def __init__(self, garden: GardenSync):
        self.garden = garden
        self.reset()

    def reset(self) -> None:
        """Return every piece of session state to its default."""
        self.selected_seed: Seed | None = None
        self.mode = InteractionMode.NONE
        self.season = DEFAULT_SEASON
        self.is_night = False
        self.harvest_reveal: Memory | None = None
        self.pending_uproot: Plant | None = None
        self.is_planting = False
        self.last_error: str | None = None

    # ==========================================================================
    # SEED PLACEMENT
    # ==========================================================================

    @property
    def placement_pending(self) -> bool:
        return self.selected_seed is not None

    def select_seed(self, seed: Seed | None) -> None:
        """Select a seed for placement (None clears the selection)."""
        self.selected_seed = seed

    def clear_selection(self) -> None:
        self.selected_seed = None

    def click_garden(self, point: CanvasPoint) -> Plant | None:
        """Handle a click on the garden at ``point`` (current canvas units).

        With a seed selected and the point below the sky line, the point is
        clamped into the planting zone and the seed is planted there.
        A click in the sky or off the canvas is a no-op and keeps the seed
        selected.

        Returns:
            The created Plant, or None if nothing was planted
        """
        if self.selected_seed is None or self.is_planting:
            return None

        point = CanvasPoint(*point)
        canvas = self.garden.canvas
        if not is_plantable(point, canvas):
            logger.debug("Click at %s is outside the planting zone", point)
            return None

        seed = self.selected_seed
        if seed.id and self.garden.find_seed(seed.id) is None and not self.garden.loading:
            # Consumed by another client since it was selected
            logger.debug("Selected seed %s is no longer available", seed.id)
            self.selected_seed = None
            return None

        position = to_position(clamp_to_planting_zone(point, canvas))
        self.is_planting = True
        try:
            plant = self.garden.plant(seed, position)
        except GardenError as e:
            self.last_error = e.message
            logger.warning("Planting seed %s failed: %s", seed.id, e.message)
            return None
        finally:
            self.is_planting = False

        self.selected_seed = None
        self.last_error = None
        return plant

    # ==========================================================================
    # INTERACTION MODES
    # ==========================================================================

    def toggle_watering(self) -> InteractionMode:
        self.mode = InteractionMode.NONE if self.mode is InteractionMode.WATERING else InteractionMode.WATERING
        self.pending_uproot = None
        return self.mode

    def toggle_uprooting(self) -> InteractionMode:
        self.mode = InteractionMode.NONE if self.mode is InteractionMode.UPROOTING else InteractionMode.UPROOTING
        if self.mode is not InteractionMode.UPROOTING:
            self.pending_uproot = None
        return self.mode

    def click_plant(self, plant: Plant, now: datetime | None = None) -> PlantAction:
        """Route a click on ``plant``.

        - uprooting mode: stage the uproot for confirmation
        - ready plant: harvest it and show the reveal
        - watering mode, or a thirsty plant: water it
        - otherwise nothing happens
        """
        if self.mode is InteractionMode.UPROOTING:
            self.pending_uproot = plant
            return PlantAction.UPROOT_STAGED

        now = now or self.garden.now()
        try:
            if plant.growth_stage(now) is GrowthStage.READY:
                self.harvest_reveal = self.garden.harvest(plant)
                return PlantAction.HARVESTED
            if self.mode is InteractionMode.WATERING or needs_water(plant.hydration(now)):
                self.garden.water(plant.id)
                return PlantAction.WATERED
        except GardenError as e:
            self.last_error = e.message
            logger.warning("Action on plant %s failed: %s", plant.id, e.message)
        return PlantAction.NONE

    def confirm_uproot(self) -> bool:
        """Uproot the staged plant.

        Returns:
            True if a plant was uprooted
        """
        plant, self.pending_uproot = self.pending_uproot, None
        if plant is None:
            return False
        try:
            return self.garden.uproot(plant)
        except GardenError as e:
            self.last_error = e.message
            logger.warning("Uprooting plant %s failed: %s", plant.id, e.message)
            return False

    def cancel_uproot(self) -> None:
        self.pending_uproot = None

    def dismiss_harvest(self) -> None:
        self.harvest_reveal = None

    # ==========================================================================
    # COSMETICS
    # ==========================================================================

    def cycle_season(self) -> Season:
        index = SEASON_CYCLE.index(self.season)
        self.season = SEASON_CYCLE[(index + 1) % len(SEASON_CYCLE)]
        return self.season

    def toggle_night(self) -> bool:
        self.is_night = not self.is_night
        return self.is_night
