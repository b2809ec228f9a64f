"""Tests for worker registration, build dispatch, gathering and refunds."""

import pytest
from sc2.ids.unit_typeid import UnitTypeId as UnitID
from sc2.position import Point2

from ForemanBot.construction import BuilderError, BuilderManager, PlacementLocator
from ForemanBot.economy import Cost, ResourceLedger
from ForemanBot.world import UnitRef

from conftest import FakeWorld


DEPOT_SITE = Point2((27, 27))


@pytest.fixture
def scv(world, manager):
    """One registered SCV, tag 10, on tile (20, 20)."""
    unit = world.add_worker(10, 20.5, 20.5)
    manager.register_worker(unit)
    return unit


@pytest.fixture
def funded(ledger):
    ledger.observe(minerals=500, gas=0)
    return ledger


# ── registration ─────────────────────────────────────────────────────────────

class TestRegistration:

    def test_register_worker(self, world, manager):
        assert manager.register_worker(world.add_worker(10, 20.5, 20.5))
        assert manager.worker_count() == 1
        assert manager.builders[0].home == 1

    def test_register_twice_is_rejected(self, world, manager):
        unit = world.add_worker(10, 20.5, 20.5)
        manager.register_worker(unit)
        assert manager.register_worker(unit) is False
        assert manager.worker_count() == 1

    def test_non_worker_raises(self, manager):
        marine = UnitRef(20, UnitID.MARINE, Point2((20.5, 20.5)))
        with pytest.raises(BuilderError):
            manager.register_worker(marine)
        assert manager.worker_count() == 0

    def test_no_townhall(self):
        world = FakeWorld()
        manager = BuilderManager(world, world, PlacementLocator(world))
        assert manager.register_worker(world.add_worker(10, 20.5, 20.5)) is False
        assert manager.worker_count() == 0

    def test_register_workers_skips_other_units(self, world, manager):
        world.add_worker(10, 20.5, 20.5)
        world.add_worker(11, 21.5, 20.5)
        world.own.append(UnitRef(30, UnitID.MARINE, Point2((5.5, 5.5))))
        assert manager.register_workers(world.own_units()) == 2
        assert manager.register_workers(world.own_units()) == 0
        assert manager.worker_summary() == "2 workers"

    def test_prune_missing_worker(self, world, manager, scv):
        world.remove(10)
        assert manager.prune_missing_workers(frame=3) == 1
        assert manager.worker_count() == 0


# ── dispatch ─────────────────────────────────────────────────────────────────

class TestAttemptBuild:

    def test_no_workers(self, world, manager, funded):
        assert manager.attempt_build_supply_structure(frame=5) is False
        assert funded.spendable == Cost(500, 0)
        assert world.builds == []

    def test_dispatch_reserves_cost(self, world, manager, funded, scv):
        assert manager.attempt_build_supply_structure(frame=10) is True
        assert world.builds == [(10, UnitID.SUPPLYDEPOT, DEPOT_SITE)]
        assert funded.spendable_minerals == 400
        assert funded.minerals == 500
        assert manager.builder_for(10).pending_task == UnitID.SUPPLYDEPOT
        assert manager.requested_structures == (UnitID.SUPPLYDEPOT,)
        assert manager.pending_count(UnitID.SUPPLYDEPOT) == 1

    def test_gas_cost_reserved(self, world, manager, ledger, scv):
        ledger.observe(minerals=300, gas=200)
        assert manager.attempt_build(UnitID.FACTORY, frame=10)
        assert ledger.spendable == Cost(150, 100)

    def test_cannot_afford(self, world, manager, ledger, scv):
        ledger.observe(minerals=99, gas=0)
        assert manager.attempt_build_supply_structure(frame=10) is False
        assert world.builds == []
        assert manager.builder_for(10).pending is None
        assert ledger.spendable == Cost(99, 0)

    def test_engine_rejects(self, world, manager, funded, scv):
        world.accept_builds = False
        assert manager.attempt_build_supply_structure(frame=10) is False
        assert funded.spendable == Cost(500, 0)
        assert manager.builder_for(10).pending is None
        assert manager.requested_structures == ()

    def test_no_site(self, world, manager, funded, scv):
        world.build_predicate = lambda tile: False
        assert manager.attempt_build_supply_structure(frame=10) is False
        assert funded.spendable == Cost(500, 0)

    def test_constructing_worker_skipped(self, world, manager, funded, scv):
        manager.register_worker(world.add_worker(11, 21.5, 20.5))
        world.set_status(10, is_constructing=True)
        assert manager.attempt_build_supply_structure(frame=10)
        assert world.builds[0][0] == 11

    def test_all_workers_busy(self, world, manager, funded, scv):
        world.set_status(10, is_constructing=True)
        assert manager.attempt_build_supply_structure(frame=10) is False
        assert funded.spendable == Cost(500, 0)

    def test_pending_worker_not_reused(self, world, manager, funded, scv):
        assert manager.attempt_build_supply_structure(frame=10)
        assert manager.attempt_build_supply_structure(frame=10) is False
        assert funded.spendable_minerals == 400

        manager.register_worker(world.add_worker(11, 21.5, 20.5))
        assert manager.attempt_build_supply_structure(frame=10)
        assert world.builds[-1][0] == 11
        assert funded.spendable_minerals == 300

    def test_no_supply_structure_configured(self, world, locator, funded):
        manager = BuilderManager(world, world, locator, ledger=funded, supply_structure=None)
        manager.register_worker(world.add_worker(10, 20.5, 20.5))
        assert manager.attempt_build_supply_structure(frame=10) is False
        assert world.builds == []

    def test_without_listener_nothing_is_reserved(self, world, locator):
        ledger = ResourceLedger()
        ledger.observe(minerals=500, gas=0)
        manager = BuilderManager(world, world, locator, ledger=ledger)
        manager.register_worker(world.add_worker(10, 20.5, 20.5))
        assert manager.attempt_build_supply_structure(frame=10)
        assert ledger.spendable == Cost(500, 0)


# ── gathering ────────────────────────────────────────────────────────────────

class TestGathering:

    def test_idle_worker_sent_to_nearest_mineral(self, world, manager, scv):
        world.add_mineral(200, 30.5, 20.5)
        world.add_mineral(201, 22.5, 22.5)
        assert manager.assign_default_gathering() == 1
        assert world.gathers == [(10, 201)]

    def test_busy_workers_left_alone(self, world, manager, scv):
        world.add_mineral(200, 22.5, 22.5)
        manager.register_worker(world.add_worker(11, 21.5, 20.5))
        world.set_status(10, is_gathering=True, target_tag=200)
        world.set_status(11, is_constructing=True)
        assert manager.assign_default_gathering() == 0
        assert world.gathers == []

    def test_pending_worker_not_sent_mining(self, world, manager, funded, scv):
        world.add_mineral(200, 22.5, 22.5)
        manager.attempt_build_supply_structure(frame=10)
        assert manager.assign_default_gathering() == 0

    def test_no_minerals(self, world, manager, scv):
        assert manager.assign_default_gathering() == 0


# ── reconciliation ───────────────────────────────────────────────────────────

class TestReconcile:

    def test_not_reconciled_on_dispatch_frame(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        assert manager.reconcile_pending_tasks(frame=10) == 0
        assert funded.spendable_minerals == 400
        assert manager.builder_for(10).pending_task == UnitID.SUPPLYDEPOT

    def test_worker_not_constructing_is_refunded(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        assert manager.reconcile_pending_tasks(frame=11) == 1
        assert funded.spendable == Cost(500, 0)
        assert manager.builder_for(10).pending is None

    def test_refund_happens_once(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        manager.reconcile_pending_tasks(frame=11)
        assert manager.reconcile_pending_tasks(frame=12) == 0
        assert funded.spendable == Cost(500, 0)

    def test_constructing_worker_keeps_reservation(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        world.set_status(10, is_constructing=True)
        assert manager.reconcile_pending_tasks(frame=11) == 0
        task = manager.builder_for(10).pending
        assert task.confirmed
        assert funded.spendable_minerals == 400

    def test_structure_started_releases_reservation(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        world.set_status(10, is_constructing=True)
        manager.reconcile_pending_tasks(frame=11)

        # Engine deducts the depot once placed
        world.place_structure(UnitID.SUPPLYDEPOT, DEPOT_SITE)
        funded.observe(minerals=400, gas=0)
        assert funded.spendable_minerals == 300

        assert manager.reconcile_pending_tasks(frame=12) == 1
        assert funded.spendable_minerals == funded.minerals == 400
        assert manager.builder_for(10).pending is None

    def test_started_structure_is_not_counted_twice(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        world.place_structure(UnitID.SUPPLYDEPOT, DEPOT_SITE)
        funded.observe(minerals=400, gas=0)
        for frame in range(11, 400):
            manager.reconcile_pending_tasks(frame=frame)
        assert funded.spendable_minerals == funded.minerals == 400

    def test_structure_elsewhere_does_not_settle_task(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        world.set_status(10, is_constructing=True)
        world.place_structure(UnitID.SUPPLYDEPOT, Point2((5, 5)))
        assert manager.reconcile_pending_tasks(frame=11) == 0
        assert manager.builder_for(10).pending.confirmed

    def test_dispatch_records_site(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        assert manager.builder_for(10).pending.tile == DEPOT_SITE

    def test_reconcile_without_frames(self, world, manager, funded, scv):
        assert manager.attempt_build_supply_structure()
        assert funded.spendable_minerals == 400
        assert manager.reconcile_pending_tasks() == 1
        assert funded.spendable == Cost(500, 0)
        assert manager.builder_for(10).pending is None

    def test_reconcile_without_frame_after_framed_dispatch(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        assert manager.reconcile_pending_tasks() == 1
        assert funded.spendable == Cost(500, 0)

    def test_grace_period(self, world, locator, funded):
        manager = BuilderManager(world, world, locator, ledger=funded, refund_grace_frames=5)
        manager.set_callbacks(funded)
        manager.register_worker(world.add_worker(10, 20.5, 20.5))
        manager.attempt_build_supply_structure(frame=10)

        assert manager.reconcile_pending_tasks(frame=14) == 0
        assert funded.spendable_minerals == 400
        assert manager.reconcile_pending_tasks(frame=15) == 1
        assert funded.spendable_minerals == 500

    def test_default_grace_when_unset(self, world, locator):
        assert BuilderManager(world, world, locator).refund_grace_frames == 1
        manager = BuilderManager(world, world, locator, refund_grace_frames=None)
        assert manager.refund_grace_frames == 1

    def test_vanished_worker_releases_reservation(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        world.remove(10)
        assert manager.prune_missing_workers(frame=11) == 1
        assert funded.spendable == Cost(500, 0)
        assert manager.pending_count() == 0

    def test_refunded_worker_can_build_again(self, world, manager, funded, scv):
        manager.attempt_build_supply_structure(frame=10)
        manager.reconcile_pending_tasks(frame=11)
        assert manager.attempt_build_supply_structure(frame=12)
        assert funded.spendable_minerals == 400
        assert len(world.builds) == 2
