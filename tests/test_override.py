"""Tests for the button-driven manual override."""

import asyncio
from datetime import timedelta

from presence_light.domain.models import ButtonEvent, ButtonReport, MotionReport, SensorClass

from .conftest import T0


def press(ctrl, at):
    return ctrl.handle_report(SensorClass.BUTTON, 0, ButtonReport(ButtonEvent.INITIAL_PRESS, at))


class TestToggle:
    """The press toggles against the reported device state."""

    async def test_press_while_off_enables_override(self, controller, transport):
        controller.handle_status({"onOff": 0})

        await controller.override.handle_press()

        assert controller.state.manual_override_active is True
        assert transport.turns == [1]

    async def test_press_while_on_disables_override(self, controller, transport):
        controller.state.manual_override_active = True
        controller.handle_status({"onOff": 1})

        await controller.override.handle_press()

        assert controller.state.manual_override_active is False
        assert transport.turns == [0]

    async def test_two_presses_through_the_store(self, controller, transport, clock):
        """Test off -> press -> on, then on -> press -> off, driven by report changes."""
        controller.handle_status({"onOff": 0})
        press(controller, T0)
        await asyncio.sleep(0.05)

        assert controller.state.manual_override_active is True
        assert transport.turns == [1]

        controller.handle_status({"onOff": 1})
        press(controller, T0 + timedelta(seconds=3))
        await asyncio.sleep(0.05)

        assert controller.state.manual_override_active is False
        assert transport.turns == [1, 0]

    async def test_override_bypasses_motion(self, controller, transport):
        """Test the press turns the light on even in a bright, empty room."""
        controller.handle_report(SensorClass.MOTION, 0, MotionReport(0, False, T0 - timedelta(hours=1)))
        controller.motion.timer.cancel()
        controller.handle_status({"onOff": 0})

        await controller.override.handle_press()

        assert transport.turns == [1]


class TestUnknownStatus:
    """No guessing when the device state is not known."""

    async def test_no_status_does_nothing(self, controller, transport):
        await controller.override.handle_press()

        assert transport.commands == []
        assert controller.state.manual_override_active is False

    async def test_status_without_on_off_does_nothing(self, controller, transport):
        """Test a status payload lacking onOff is not taken as "off"."""
        controller.handle_status({"brightness": 50})

        await controller.override.handle_press()

        assert controller.tracker.current is None
        assert transport.commands == []
        assert controller.state.manual_override_active is False

    async def test_waits_for_next_status(self, controller, transport):
        """Test a press with unknown status decides on the next response."""
        task = asyncio.create_task(controller.override.handle_press())
        await asyncio.sleep(0.01)
        controller.handle_status({"onOff": 0})
        await task

        assert transport.turns == [1]

    async def test_stale_status_is_refreshed(self, controller, transport, clock):
        """Test an old "on" is not trusted when a fresh "off" arrives."""
        controller.handle_status({"onOff": 1})
        clock.advance(60)

        task = asyncio.create_task(controller.override.handle_press())
        await asyncio.sleep(0.01)
        controller.handle_status({"onOff": 0})
        await task

        assert controller.state.manual_override_active is True
        assert transport.turns == [1]

    async def test_stale_status_without_response(self, controller, transport, clock):
        controller.handle_status({"onOff": 1})
        clock.advance(60)

        await controller.override.handle_press()

        assert transport.commands == []


class TestNonInitialEvents:
    async def test_repeat_never_triggers(self, controller, transport):
        controller.handle_status({"onOff": 0})

        controller.handle_report(SensorClass.BUTTON, 0, ButtonReport(ButtonEvent.REPEAT, T0))
        await asyncio.sleep(0.05)

        assert not controller.override.timer.pending
        assert controller.store.button is None
        assert transport.commands == []
