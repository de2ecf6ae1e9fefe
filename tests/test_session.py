"""Tests for per-client session state.

Coverage:
- Seed selection and placement by clicking the garden
- Sky clicks, margin clamping, vanished seeds
- Interaction modes are mutually exclusive
- Plant click routing: uproot staging, harvest, watering
- Uproot confirmation and cancellation
- Cosmetic season and night toggles
"""

import pytest

from garden.admin import create_seed
from garden.core.canvas import CanvasPoint
from garden.core.types import Position
from garden.session import GardenSession, InteractionMode, PlantAction, Season
from garden.sync import GardenSync


@pytest.fixture
def session(garden):
    return GardenSession(garden)


@pytest.fixture
def long_plant(garden, store, clock):
    """A week-long plant, planted at t0."""
    seed = create_seed(store, "slow", 10080, "lavender", now=clock())
    return garden.plant(seed, Position(250, 600, canvas=3))


class TestPlacement:
    """Tests for selecting a seed and clicking the garden."""

    def test_select_and_clear(self, session, seed):
        session.select_seed(seed)
        assert session.placement_pending
        session.clear_selection()
        assert not session.placement_pending

    def test_click_without_selection(self, session, garden):
        assert session.click_garden(CanvasPoint(250, 600)) is None
        assert garden.plants == ()

    def test_click_plants_selected_seed(self, session, garden, seed):
        session.select_seed(seed)
        plant = session.click_garden(CanvasPoint(250, 600))

        assert plant is not None
        assert plant.position == Position(250, 600, canvas=3)
        assert garden.plants == (plant,)
        assert not session.placement_pending

    @pytest.mark.parametrize("point", [CanvasPoint(250, 100), CanvasPoint(-5, 600), CanvasPoint(250, 950)])
    def test_click_outside_zone_keeps_selection(self, session, garden, seed, point):
        session.select_seed(seed)
        assert session.click_garden(point) is None
        assert session.placement_pending
        assert garden.plants == ()

    def test_click_in_margin_is_clamped(self, session, seed):
        session.select_seed(seed)
        plant = session.click_garden(CanvasPoint(10, 890))
        assert plant.position.x == pytest.approx(40)
        assert plant.position.y == pytest.approx(855)

    def test_seed_taken_by_another_client(self, session, store, clock, seed):
        session.select_seed(seed)
        with GardenSync(store, clock=clock) as other:
            other.plant(seed, Position(250, 600, canvas=3))

        assert session.click_garden(CanvasPoint(250, 600)) is None
        assert not session.placement_pending
        assert len(session.garden.plants) == 1

    def test_failure_keeps_selection(self, flaky_store, clock):
        seed = create_seed(flaky_store, "hi", 10, "golden", now=clock())
        with GardenSync(flaky_store, clock=clock) as garden:
            session = GardenSession(garden)
            session.select_seed(garden.seeds[0])
            flaky_store.fail_on.add("create")

            assert session.click_garden(CanvasPoint(250, 600)) is None
            assert session.selected_seed.id == seed.id
            assert session.last_error == "Simulated create failure"
            assert not session.is_planting


class TestModes:
    """Tests for the watering and uprooting modes."""

    def test_modes_are_exclusive(self, session):
        assert session.toggle_watering() is InteractionMode.WATERING
        assert session.toggle_uprooting() is InteractionMode.UPROOTING
        assert session.mode is InteractionMode.UPROOTING
        assert session.toggle_uprooting() is InteractionMode.NONE

    def test_toggle_twice_returns_to_none(self, session):
        session.toggle_watering()
        assert session.toggle_watering() is InteractionMode.NONE


class TestClickPlant:
    """Tests for click_plant() routing."""

    def test_healthy_growing_plant(self, session, long_plant, clock):
        clock.advance(hours=1)
        assert session.click_plant(long_plant) is PlantAction.NONE

    def test_watering_mode(self, session, garden, long_plant, clock):
        clock.advance(hours=1)
        session.toggle_watering()
        assert session.click_plant(long_plant) is PlantAction.WATERED
        assert garden.find_plant(long_plant.id).last_watered_at.to_datetime() == clock()

    def test_thirsty_plant_watered_without_mode(self, session, long_plant, clock):
        clock.advance(hours=13)
        assert session.click_plant(long_plant) is PlantAction.WATERED

    def test_ready_plant_harvested(self, session, garden, seed, clock):
        plant = garden.plant(seed, Position(250, 600, canvas=3))
        clock.advance(minutes=60)

        assert session.click_plant(plant) is PlantAction.HARVESTED
        assert session.harvest_reveal.message == seed.message
        assert garden.plants == ()

        session.dismiss_harvest()
        assert session.harvest_reveal is None

    def test_uprooting_mode_stages(self, session, garden, long_plant):
        session.toggle_uprooting()
        assert session.click_plant(long_plant) is PlantAction.UPROOT_STAGED
        assert session.pending_uproot == long_plant
        assert garden.plants == (long_plant,)


class TestUprootConfirmation:
    """Tests for confirm_uproot() and cancel_uproot()."""

    def test_confirm(self, session, garden, long_plant):
        session.toggle_uprooting()
        session.click_plant(long_plant)

        assert session.confirm_uproot() is True
        assert garden.plants == ()
        assert garden.memories == ()
        assert session.pending_uproot is None

    def test_cancel(self, session, garden, long_plant):
        session.toggle_uprooting()
        session.click_plant(long_plant)
        session.cancel_uproot()

        assert session.confirm_uproot() is False
        assert garden.plants == (long_plant,)

    def test_leaving_uproot_mode_drops_staged_plant(self, session, long_plant):
        session.toggle_uprooting()
        session.click_plant(long_plant)
        session.toggle_watering()
        assert session.pending_uproot is None


class TestCosmetics:
    """Tests for season and night toggles."""

    def test_season_cycle(self, session):
        assert session.season is Season.SUMMER
        seasons = [session.cycle_season() for _ in range(4)]
        assert seasons == [Season.FALL, Season.WINTER, Season.SPRING, Season.SUMMER]

    def test_night(self, session):
        assert session.toggle_night() is True
        assert session.toggle_night() is False

    def test_reset(self, session):
        session.toggle_night()
        session.cycle_season()
        session.toggle_watering()
        session.reset()
        assert session.mode is InteractionMode.NONE
        assert session.season is Season.SUMMER
        assert not session.is_night
