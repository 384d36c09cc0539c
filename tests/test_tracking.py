import pytest

from routemap.models.domain import Viewport
from routemap.services.tracking import (
    NOTICE_MESSAGES,
    GeolocationError,
    GeolocationErrorCode,
    LiveTrackingController,
    PositionFix,
    TrackingState,
)


class DummyProvider:
    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    def current_position(self) -> PositionFix:
        self.calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, GeolocationError):
            raise outcome
        return outcome


def _controller(provider, **kwargs):
    updates: list = []
    notices: list = []
    controller = LiveTrackingController(
        provider,
        on_update=updates.append,
        on_notice=notices.append,
        clock=lambda: 0.0,
        **kwargs,
    )
    return controller, updates, notices


def test_first_fix_starts_tracking_and_triggers_update() -> None:
    controller, updates, notices = _controller(DummyProvider(PositionFix(50.85, 4.35)))

    assert controller.state is TrackingState.IDLE
    assert controller.start(now=0.0) is None

    assert controller.state is TrackingState.TRACKING
    assert controller.driver_position == (50.85, 4.35)
    assert updates == [(50.85, 4.35)]
    assert notices == []


@pytest.mark.parametrize("code", list(GeolocationErrorCode))
def test_errors_become_notices_without_raising(code: GeolocationErrorCode) -> None:
    controller, updates, notices = _controller(DummyProvider(GeolocationError(code)))

    notice = controller.start(now=0.0)

    assert notice is not None
    assert notice.code is code
    assert notice.message == NOTICE_MESSAGES[code]
    assert notices == [notice]
    assert controller.last_notice == notice
    assert controller.state is TrackingState.IDLE
    assert updates == []


def test_error_while_tracking_keeps_tracking() -> None:
    provider = DummyProvider(
        PositionFix(50.85, 4.35),
        GeolocationError(GeolocationErrorCode.TIMEOUT, "slow fix"),
    )
    controller, updates, notices = _controller(provider, poll_interval_seconds=30)

    controller.start(now=0.0)
    notice = controller.poll(now=30.0)

    assert notice.message == "slow fix"
    assert controller.state is TrackingState.TRACKING
    assert controller.driver_position == (50.85, 4.35)


def test_poll_respects_interval() -> None:
    provider = DummyProvider(PositionFix(50.85, 4.35), PositionFix(50.86, 4.36))
    controller, updates, _ = _controller(provider, poll_interval_seconds=30)

    controller.start(now=0.0)
    controller.poll(now=10.0)
    assert provider.calls == 1

    controller.poll(now=30.0)
    assert provider.calls == 2
    assert updates == [(50.85, 4.35), (50.86, 4.36)]


def test_poll_before_start_does_nothing() -> None:
    provider = DummyProvider(PositionFix(50.85, 4.35))
    controller, _, _ = _controller(provider)

    assert controller.poll(now=100.0) is None
    assert provider.calls == 0


def test_stop_halts_polling() -> None:
    provider = DummyProvider(PositionFix(50.85, 4.35))
    controller, _, _ = _controller(provider, poll_interval_seconds=30)

    controller.start(now=0.0)
    controller.stop()
    controller.poll(now=60.0)

    assert provider.calls == 1


def test_recenter() -> None:
    controller, _, _ = _controller(DummyProvider(PositionFix(50.85, 4.35)), recenter_zoom=15)

    assert controller.recenter() is None
    controller.start(now=0.0)

    assert controller.recenter() == Viewport(center=(50.85, 4.35), zoom=15)


def test_invalid_fix_is_ignored() -> None:
    controller, updates, _ = _controller(DummyProvider(PositionFix(50.85, 4.35)))

    assert controller.on_position(PositionFix(123.0, 4.35), now=0.0) is False
    assert controller.state is TrackingState.IDLE
    assert updates == []


def test_debounce_coalesces_and_last_position_wins() -> None:
    controller, updates, _ = _controller(DummyProvider(PositionFix(0.0, 0.0)), debounce_seconds=5)

    assert controller.on_position(PositionFix(50.0, 4.0), now=0.0) is True
    assert controller.on_position(PositionFix(50.1, 4.1), now=1.0) is False
    assert controller.on_position(PositionFix(50.2, 4.2), now=2.0) is False
    assert controller.driver_position == (50.2, 4.2)
    assert controller.has_pending_update

    assert controller.flush(now=3.0) is False
    assert controller.flush(now=5.0) is True

    assert updates == [(50.0, 4.0), (50.2, 4.2)]
    assert not controller.has_pending_update


def test_without_debounce_every_fix_recomputes() -> None:
    controller, updates, _ = _controller(DummyProvider(PositionFix(0.0, 0.0)), debounce_seconds=0)

    controller.on_position(PositionFix(50.0, 4.0), now=0.0)
    controller.on_position(PositionFix(50.1, 4.1), now=0.1)

    assert updates == [(50.0, 4.0), (50.1, 4.1)]
