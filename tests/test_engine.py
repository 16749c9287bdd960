"""Tests for the motion decision engine."""

from datetime import timedelta

import pytest

from presence_light.domain.models import LightLevelReport, MotionReport, SensorClass

from .conftest import T0


ON_TIME = 120.0


def motion(ctrl, index, detected, changed_at):
    ctrl.handle_report(SensorClass.MOTION, index, MotionReport(index, detected, changed_at))


def light(ctrl, index, level):
    ctrl.handle_report(SensorClass.LIGHT_LEVEL, index, LightLevelReport(index, level, T0))


class TestNoReports:
    async def test_nothing_happens(self, controller, transport):
        """Test evaluating with no motion reports does nothing."""
        controller.motion.evaluate()

        assert transport.commands == []
        assert not controller.motion.timer.pending


class TestMotionPresent:
    """Motion on any sensor."""

    async def test_dark_room_turns_on(self, controller, transport):
        """Test dispatching on and the long cool-down re-check."""
        motion(controller, 0, True, T0)
        light(controller, 0, 8000)

        controller.motion.evaluate()

        assert transport.turns == [1]
        assert controller.motion.timer.delay == pytest.approx(2 * ON_TIME)
        assert controller.state.last_turned_on_at == T0

    async def test_threshold_is_inclusive(self, controller, transport):
        motion(controller, 0, True, T0)
        light(controller, 0, 8500)

        controller.motion.evaluate()

        assert transport.turns == [1]

    async def test_bright_room_does_nothing(self, controller, transport):
        """Test sensor A bright with motion, sensor B dark without motion."""
        motion(controller, 0, True, T0)
        light(controller, 0, 9000)
        motion(controller, 1, False, T0)
        light(controller, 1, 100)

        controller.motion.evaluate()

        assert transport.commands == []

    async def test_missing_light_level_does_nothing(self, controller, transport):
        motion(controller, 0, True, T0)

        controller.motion.evaluate()

        assert transport.commands == []

    async def test_uses_first_sensor_with_motion(self, controller, transport):
        """Test the paired reading of the sensor that saw motion decides."""
        motion(controller, 0, False, T0)
        motion(controller, 1, True, T0)
        light(controller, 0, 9000)
        light(controller, 1, 300)

        controller.motion.evaluate()

        assert transport.turns == [1]

    async def test_ignores_time_since_motion(self, controller, transport, clock):
        motion(controller, 0, True, T0)
        light(controller, 0, 10)
        clock.advance(3600)

        controller.motion.evaluate()

        assert transport.turns == [1]


class TestNoMotion:
    """Hold, expiry and override suppression."""

    async def test_hold_reschedules_at_expiry(self, controller, transport, clock):
        """Test 30s since motion ended re-checks 90s later without dispatching."""
        # stored changed_at = raw - 10s skew = now - 30s
        motion(controller, 0, False, T0 - timedelta(seconds=20))
        motion(controller, 1, False, T0 - timedelta(seconds=50))

        controller.motion.evaluate()

        assert transport.commands == []
        assert controller.motion.timer.delay == pytest.approx(90.0)

    async def test_expiry_turns_off(self, controller, transport):
        motion(controller, 0, False, T0 - timedelta(seconds=120))
        motion(controller, 1, False, T0 - timedelta(seconds=200))

        controller.motion.evaluate()

        assert transport.turns == [0]
        assert controller.motion.timer.delay == pytest.approx(2 * ON_TIME)

    async def test_override_suppresses_off(self, controller, transport):
        """Test the manual override keeps the light on but still re-checks."""
        controller.state.manual_override_active = True
        motion(controller, 0, False, T0 - timedelta(seconds=120))

        controller.motion.evaluate()

        assert transport.commands == []
        assert controller.motion.timer.delay == pytest.approx(2 * ON_TIME)

    async def test_missing_sensor_counts_as_epoch(self, controller, transport):
        """Test one silent sensor does not hold the light on."""
        motion(controller, 1, False, T0 - timedelta(seconds=300))

        controller.motion.evaluate()

        assert transport.turns == [0]

    async def test_latest_change_wins(self, controller, transport):
        motion(controller, 0, False, T0 - timedelta(seconds=500))
        motion(controller, 1, False, T0 - timedelta(seconds=40))

        controller.motion.evaluate()

        assert transport.commands == []
        assert controller.motion.timer.delay == pytest.approx(70.0)

    async def test_off_reports_duration(self, controller, transport, clock):
        motion(controller, 0, True, T0)
        light(controller, 0, 10)
        controller.motion.evaluate()

        clock.advance(300)
        motion(controller, 0, False, clock.now - timedelta(seconds=200))
        controller.motion.evaluate()

        assert transport.turns == [1, 0]
        assert controller.state.last_turned_on_at is None


class TestScheduling:
    """Report changes drive the engine through its timer."""

    async def test_change_schedules_next_tick(self, controller):
        motion(controller, 0, True, T0)

        assert controller.motion.timer.pending
        assert controller.motion.timer.delay == pytest.approx(0.001)

    async def test_duplicate_does_not_reschedule(self, controller):
        motion(controller, 0, True, T0)
        controller.motion.timer.cancel()

        motion(controller, 0, True, T0)

        assert not controller.motion.timer.pending

    async def test_light_level_change_does_not_schedule(self, controller):
        light(controller, 0, 100)

        assert not controller.motion.timer.pending
