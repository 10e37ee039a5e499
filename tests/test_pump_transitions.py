"""Pump transition detection: one notification per real-world transition."""

import threading

import pytest

from app.domain.readings import SensorReading
from app.enums import NotificationKind, PumpMode
from app.services.application.pump_transition_service import PumpTransitionService


def _reading(pump_on, temperature=32.0):
    return SensorReading(temperature=temperature, humidity=70.0, water_level=80, pump_on=pump_on)


def _kinds(notification_repo):
    return [row["kind"] for row in reversed(notification_repo.list_recent(500))]


class TestObserve:
    def test_unchanged_state_produces_nothing(self, transitions, notification_repo):
        assert transitions.observe(_reading(False)) is None
        assert notification_repo.list_recent(10) == []

    def test_missing_pump_flag_skips_detection(self, transitions, notification_repo):
        assert transitions.observe(_reading(None)) is None
        assert transitions.previous_pump_status is False
        assert notification_repo.list_recent(10) == []

    def test_off_to_on_creates_notification_and_session(self, transitions, misting_repo):
        outcome = transitions.observe(_reading(True))

        assert outcome.changed is True
        assert outcome.kind == NotificationKind.PUMP_ON
        assert "Temp: 32.0°C" in outcome.notification["message"]
        assert outcome.session is not None and outcome.session.is_open
        assert misting_repo.get_open().id == outcome.session.id
        assert transitions.previous_pump_status is True

    def test_on_to_off_closes_the_open_session(self, transitions, misting_repo):
        opened = transitions.observe(_reading(True)).session
        closed = transitions.observe(_reading(False, temperature=29.0)).session

        assert closed.id == opened.id
        assert closed.is_open is False
        assert closed.end_metrics.temperature == 29.0
        assert misting_repo.get_open() is None

    def test_automatic_sessions_can_be_disabled(self, notifications_service, misting_service, misting_repo):
        service = PumpTransitionService(notifications_service, misting_service, auto_sessions=False)

        outcome = service.observe(_reading(True))

        assert outcome.kind == NotificationKind.PUMP_ON
        assert outcome.session is None
        assert misting_repo.get_open() is None

    def test_seeded_state_is_respected(self, notifications_service, misting_service):
        service = PumpTransitionService(notifications_service, misting_service, initial_pump_on=True)
        assert service.observe(_reading(True)) is None
        assert service.observe(_reading(False)).kind == NotificationKind.PUMP_OFF


@pytest.mark.parametrize(
    "sequence",
    [
        [True, True, False, False, True, False],
        [False, True, False, True, False, True, True],
        [True, None, True, False, None, False, True],
    ],
)
def test_notifications_match_edges_for_any_sequence(transitions, notification_repo, sequence):
    previous = False
    on_edges = off_edges = 0
    for flag in sequence:
        transitions.observe(_reading(flag))
        if flag is None:
            continue
        if flag and not previous:
            on_edges += 1
        elif previous and not flag:
            off_edges += 1
        previous = flag

    kinds = _kinds(notification_repo)
    assert kinds.count(NotificationKind.PUMP_ON.value) == on_edges
    assert kinds.count(NotificationKind.PUMP_OFF.value) == off_edges


class TestCommands:
    def test_manual_command_then_matching_reading_is_one_notification(self, transitions, notification_repo):
        outcome = transitions.apply_manual(True)
        assert outcome.kind == NotificationKind.MANUAL_ON
        assert transitions.mode == PumpMode.MANUAL

        # The controller reports the state it was just told to take.
        assert transitions.observe(_reading(True)) is None
        assert _kinds(notification_repo) == [NotificationKind.MANUAL_ON.value]

    def test_manual_command_for_known_state_is_not_a_transition(self, transitions, notification_repo):
        outcome = transitions.apply_manual(False)

        assert outcome.changed is False
        assert outcome.notification is None
        assert notification_repo.list_recent(10) == []

    def test_readings_in_manual_mode_use_manual_kinds(self, transitions):
        transitions.apply_manual(True)
        outcome = transitions.observe(_reading(False))
        assert outcome.kind == NotificationKind.MANUAL_OFF

    def test_manual_commands_open_sessions_even_without_auto_sessions(
        self, notifications_service, misting_service, misting_repo
    ):
        service = PumpTransitionService(notifications_service, misting_service, auto_sessions=False)
        outcome = service.apply_manual(True)

        assert outcome.session.mode == PumpMode.MANUAL
        assert misting_repo.get_open() is not None

    def test_switch_to_auto_always_notifies_once(self, transitions, notification_repo):
        transitions.apply_manual(True)
        outcome = transitions.switch_to_auto()

        assert outcome.kind == NotificationKind.AUTO_MODE
        assert outcome.changed is False
        assert transitions.mode == PumpMode.AUTO
        assert _kinds(notification_repo) == [NotificationKind.MANUAL_ON.value, NotificationKind.AUTO_MODE.value]

    def test_switch_to_auto_with_new_state_presets_it(self, transitions, notification_repo, misting_repo):
        transitions.apply_manual(True)
        outcome = transitions.switch_to_auto(pump_on=False)

        assert outcome.changed is True
        assert outcome.session is not None and outcome.session.is_open is False
        assert misting_repo.get_open() is None
        # The OFF reading that follows is already known.
        assert transitions.observe(_reading(False)) is None
        assert _kinds(notification_repo) == [NotificationKind.MANUAL_ON.value, NotificationKind.AUTO_MODE.value]

    def test_mixed_sources_keep_one_notification_per_edge(self, transitions, notification_repo):
        transitions.observe(_reading(True))    # PUMP_ON
        transitions.apply_manual(False)        # MANUAL_OFF
        transitions.observe(_reading(False))   # already known
        transitions.switch_to_auto()           # AUTO_MODE
        transitions.observe(_reading(True))    # PUMP_ON
        transitions.apply_manual(True)         # same state, no notification

        assert _kinds(notification_repo) == [
            NotificationKind.PUMP_ON.value,
            NotificationKind.MANUAL_OFF.value,
            NotificationKind.AUTO_MODE.value,
            NotificationKind.PUMP_ON.value,
        ]


def _run_concurrently(*calls):
    barrier = threading.Barrier(len(calls))
    errors = []

    def worker(call):
        barrier.wait()
        try:
            call()
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(call,)) for call in calls]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    assert errors == []


class TestConcurrency:
    def test_parallel_readings_of_one_edge_notify_once(self, transitions, notification_repo, misting_repo):
        _run_concurrently(*[lambda: transitions.observe(_reading(True)) for _ in range(8)])

        assert _kinds(notification_repo) == [NotificationKind.PUMP_ON.value]
        assert len(misting_repo.recent(10)) == 1
        assert transitions.previous_pump_status is True

    def test_manual_commands_racing_readings_notify_once(self, transitions, notification_repo, misting_repo):
        calls = [lambda: transitions.apply_manual(True) for _ in range(4)]
        calls += [lambda: transitions.observe(_reading(True)) for _ in range(4)]
        _run_concurrently(*calls)

        kinds = _kinds(notification_repo)
        assert len(kinds) == 1
        assert kinds[0] in (NotificationKind.PUMP_ON.value, NotificationKind.MANUAL_ON.value)
        assert len(misting_repo.recent(10)) == 1
