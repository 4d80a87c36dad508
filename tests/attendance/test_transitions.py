from dataclasses import replace

import pytest

from geoasistencia.attendance.transitions import (
    AutoCloseLock,
    FixReceived,
    Observation,
    SignalLost,
    SiteSelected,
    Tracking,
    detect_edges,
    reduce_tracking,
)
from geoasistencia.core.enums import Edge

from tests.fakes import OUTSIDE, SITE_CENTER, make_fix


@pytest.mark.parametrize(
    "previous, current, expected",
    [
        (Observation(True, True), Observation(True, True), ()),
        (Observation(True, True), Observation(False, True), (Edge.SIGNAL_LOST,)),
        (Observation(True, True), Observation(True, False), (Edge.GEOFENCE_EXIT,)),
        (Observation(True, True), Observation(False, False), (Edge.SIGNAL_LOST, Edge.GEOFENCE_EXIT)),
        (Observation(False, False), Observation(False, False), ()),
        (Observation(False, False), Observation(True, True), ()),
        (Observation(False, True), Observation(False, False), (Edge.GEOFENCE_EXIT,)),
    ],
)
def test_detect_edges_only_fires_on_true_to_false(previous, current, expected):
    assert detect_edges(previous, current) == expected


def test_fix_turns_signal_on_and_evaluates_site(site):
    state = reduce_tracking(Tracking(site=site), FixReceived(make_fix(SITE_CENTER, 1)))

    assert state.signal_available is True
    assert state.status.inside is True
    assert state.observation == Observation(True, True)


def test_duplicate_and_older_fixes_are_ignored(site):
    state = reduce_tracking(Tracking(site=site), FixReceived(make_fix(SITE_CENTER, 5)))

    assert reduce_tracking(state, FixReceived(make_fix(OUTSIDE, 5))) is state
    assert reduce_tracking(state, FixReceived(make_fix(OUTSIDE, 4))) is state


def test_fix_after_signal_loss_restores_signal(site):
    state = reduce_tracking(Tracking(site=site), FixReceived(make_fix(SITE_CENTER, 1)))
    state = reduce_tracking(state, SignalLost("Error GPS"))
    assert state.signal_error == "Error GPS"

    state = reduce_tracking(state, FixReceived(make_fix(SITE_CENTER, 2)))
    assert state.signal_available is True
    assert state.signal_error is None


def test_signal_loss_keeps_last_containment(site):
    state = reduce_tracking(Tracking(site=site), FixReceived(make_fix(SITE_CENTER, 1)))
    state = reduce_tracking(state, SignalLost("timeout"))

    assert state.observation == Observation(False, True)
    assert state.fix is not None


def test_site_change_reevaluates_last_fix(site):
    state = reduce_tracking(Tracking(site=site), FixReceived(make_fix(SITE_CENTER, 1)))
    far_site = replace(site, site_id=2, coord=OUTSIDE, radius_meters=10.0)

    state = reduce_tracking(state, SiteSelected(far_site))
    assert state.status.inside is False

    state = reduce_tracking(state, SiteSelected(None))
    assert state.status.distance_meters is None


def test_unknown_event_is_a_programming_error():
    with pytest.raises(TypeError):
        reduce_tracking(Tracking(), object())


def test_lock_stays_armed_until_cooldown_after_release(clock):
    lock = AutoCloseLock(4.0, clock=clock)
    assert lock.armed is False

    lock.arm()
    clock.advance(60)
    # Still submitting: no release yet
    assert lock.armed is True

    lock.release()
    clock.advance(3)
    assert lock.armed is True
    clock.advance(1)
    assert lock.armed is False


def test_release_without_arm_is_noop(clock):
    lock = AutoCloseLock(4.0, clock=clock)
    lock.release()
    assert lock.armed is False
