"""
Tests for the Interaction Engine
=================================

Frame-level behaviour: hysteresis, rotation, clicks, pointer and the
neutral signal on hand loss.
"""

import threading

import pytest

from touchless_surface.control.mode_machine import InteractionConfig, ModeStateMachine
from touchless_surface.core.engine import InteractionEngine
from touchless_surface.core.events import EventBus, Events
from touchless_surface.core.state import EngineState
from touchless_surface.core.types import FeedbackColor, GestureLabel, InteractionMode, MotionDelta
from touchless_surface.detection.landmark_adapter import HandFrame

# 1/32 s: exactly representable, so cooldown arithmetic is exact
DT = 0.03125


def feed(engine, frames, start=0.0, dt=DT, photo_modal_open=False):
    """Process frames at a fixed rate; returns the signals."""
    signals = []
    for i, frame in enumerate(frames):
        signals.append(engine.process_frame(frame, now=start + i * dt,
                                            photo_modal_open=photo_modal_open))
    return signals


@pytest.fixture
def engine():
    return InteractionEngine()


@pytest.fixture
def formed_engine():
    return InteractionEngine(state=EngineState(mode=InteractionMode.FORMED))


class TestInitialState:

    def test_fresh_engine(self, engine):
        assert engine.state.mode == InteractionMode.CHAOS
        assert engine.state.rotation_boost == 0.0
        assert engine.state.click_cooldown == 0.0

    def test_state_is_caller_owned(self):
        state = EngineState()
        engine = InteractionEngine(state=state)

        engine.process_frame(HandFrame.empty(), now=0.0)

        assert engine.state is state
        assert state.frames_processed == 1


class TestReformTransition:
    """CHAOS -> FORMED on a closed fist held for more than 5 frames."""

    def test_six_fists_reform(self, engine, make_frame):
        signals = feed(engine, [make_frame("Closed_Fist", 0.9)] * 6)

        assert [s.mode for s in signals[:5]] == [InteractionMode.CHAOS] * 5
        assert signals[5].mode == InteractionMode.FORMED
        assert signals[5].mode_changed
        assert not any(s.mode_changed for s in signals[:5])

    def test_reform_leaves_rotation_and_clicks_alone(self, engine, make_frame):
        signals = feed(engine, [make_frame("Closed_Fist", 0.9, pinch=False)] * 6)

        assert engine.state.rotation_boost == 0.0
        assert all(s.click_event is None for s in signals)

    def test_streak_count_reset_after_transition(self, engine, make_frame):
        feed(engine, [make_frame("Closed_Fist", 0.9)] * 6)

        assert engine.state.streak.count == 0

    def test_interrupted_streak_restarts(self, engine, make_frame):
        frames = ([make_frame("Closed_Fist", 0.9)] * 3
                  + [make_frame("Thumb_Up", 0.9)]
                  + [make_frame("Closed_Fist", 0.9)] * 5)
        signals = feed(engine, frames)

        assert signals[-1].mode == InteractionMode.CHAOS

        signal = engine.process_frame(make_frame("Closed_Fist", 0.9), now=1.0)
        assert signal.mode == InteractionMode.FORMED

    def test_low_confidence_interrupts_streak(self, engine, make_frame):
        frames = ([make_frame("Closed_Fist", 0.9)] * 5
                  + [make_frame("Closed_Fist", 0.3)]
                  + [make_frame("Closed_Fist", 0.9)])
        signals = feed(engine, frames)

        assert signals[-1].mode == InteractionMode.CHAOS

    def test_fist_in_formed_does_nothing(self, formed_engine, make_frame):
        signals = feed(formed_engine, [make_frame("Closed_Fist", 0.9)] * 20)

        assert all(s.mode == InteractionMode.FORMED for s in signals)
        assert not any(s.mode_changed for s in signals)


class TestDissolveTransition:
    """FORMED -> CHAOS on an open palm held for more than 10 frames."""

    def test_eleventh_palm_dissolves(self, formed_engine, make_frame):
        signals = feed(formed_engine, [make_frame("Open_Palm", 0.9)] * 11)

        assert [s.mode for s in signals[:10]] == [InteractionMode.FORMED] * 10
        assert signals[10].mode == InteractionMode.CHAOS
        assert signals[10].mode_changed

    def test_approach_feedback(self, formed_engine, make_frame):
        signals = feed(formed_engine, [make_frame("Open_Palm", 0.9)] * 3)

        assert all(s.feedback_color == FeedbackColor.DISSOLVE_APPROACH for s in signals)

    def test_palm_in_formed_does_not_rotate(self, formed_engine, make_frame):
        frames = [make_frame("Open_Palm", 0.9, cx=0.5 + 0.02 * i) for i in range(8)]
        feed(formed_engine, frames)

        assert formed_engine.state.rotation_boost == 0.0

    def test_round_trip(self, engine, make_frame):
        feed(engine, [make_frame("Closed_Fist", 0.9)] * 6)
        assert engine.state.mode == InteractionMode.FORMED

        feed(engine, [make_frame("Open_Palm", 0.9)] * 11, start=1.0)
        assert engine.state.mode == InteractionMode.CHAOS


class TestRotation:
    """Open palm in CHAOS steers the rotation boost from the palm delta."""

    def test_boost_per_frame(self, engine, make_frame):
        # Hand moves right in camera space, i.e. dx = -0.01 after mirroring
        frames = [make_frame("Open_Palm", 0.9, cx=0.3 + 0.01 * i) for i in range(6)]
        signals = feed(engine, frames)

        assert signals[0].rotation_boost == 0.0
        for i in range(1, 6):
            assert signals[i].rotation_boost == pytest.approx(0.15 * i)
            assert signals[i].feedback_color == FeedbackColor.ROTATE_ACTIVE

    def test_boost_clamped_high(self, engine, make_frame):
        frames = [make_frame("Open_Palm", 0.9, cx=0.1 + 0.01 * i) for i in range(60)]
        signals = feed(engine, frames)

        assert max(s.rotation_boost for s in signals) == 5.0
        assert signals[-1].rotation_boost == 5.0

    def test_boost_clamped_low(self, engine, make_frame):
        frames = [make_frame("Open_Palm", 0.9, cx=0.9 - 0.01 * i) for i in range(60)]
        signals = feed(engine, frames)

        assert signals[-1].rotation_boost == -5.0

    def test_deadzone(self, engine, make_frame):
        frames = [make_frame("Open_Palm", 0.9, cx=0.5 + 0.001 * i) for i in range(10)]
        signals = feed(engine, frames)

        assert all(s.rotation_boost == 0.0 for s in signals)

    @pytest.mark.parametrize("dx", [-1e6, -3.0, -0.5, 0.5, 3.0, 1e6])
    def test_clamp_for_any_delta(self, dx):
        machine = ModeStateMachine(EngineState())
        for _ in range(5):
            machine.evaluate(GestureLabel.OPEN_PALM, MotionDelta(dx=dx))
            assert -5.0 <= machine.rotation_boost <= 5.0

    def test_boost_frozen_without_hand(self, engine, make_frame):
        frames = [make_frame("Open_Palm", 0.9, cx=0.3 + 0.01 * i) for i in range(4)]
        feed(engine, frames)
        boost = engine.state.rotation_boost

        signals = feed(engine, [HandFrame.empty()] * 5, start=1.0)

        assert all(s.rotation_boost == boost for s in signals)

    def test_boost_does_not_decay(self, engine, make_frame):
        frames = [make_frame("Open_Palm", 0.9, cx=0.3 + 0.01 * i) for i in range(4)]
        feed(engine, frames)
        boost = engine.state.rotation_boost

        # Still palm: no delta, no decay
        feed(engine, [make_frame("Open_Palm", 0.9, cx=0.33)] * 30, start=1.0)

        assert engine.state.rotation_boost == boost


class TestClicks:
    """Pinch clicks with a one second cooldown."""

    def test_pinch_fires(self, engine, make_frame):
        signal = engine.process_frame(make_frame("Pointing_Up", 0.9, pinch=True), now=12.5)

        assert signal.click_event == 12.5
        assert signal.clicked
        assert signal.feedback_color == FeedbackColor.CLICK_FIRED

    def test_no_pinch_no_click(self, engine, make_frame):
        signal = engine.process_frame(make_frame("Pointing_Up", 0.9, pinch=False), now=0.0)

        assert signal.click_event is None

    def test_fist_never_clicks(self, engine, make_frame):
        signals = feed(engine, [make_frame("Closed_Fist", 0.9, pinch=True)] * 3)

        assert all(s.click_event is None for s in signals)

    def test_low_confidence_pinch_clicks(self, engine, make_frame):
        signal = engine.process_frame(make_frame("Closed_Fist", 0.2, pinch=True), now=0.0)

        assert signal.clicked

    @pytest.mark.parametrize("gap, expected", [
        (0.25, 1),
        (0.5, 1),
        (0.75, 1),
        (0.96875, 1),
        (1.0, 2),
        (1.5, 2),
    ])
    def test_cooldown(self, engine, make_frame, gap, expected):
        pinch = make_frame("Pointing_Up", 0.9, pinch=True)
        first = engine.process_frame(pinch, now=0.0)
        second = engine.process_frame(pinch, now=gap)

        assert [first.clicked, second.clicked].count(True) == expected

    def test_held_pinch_clicks_once_per_second(self, engine, make_frame):
        pinch = make_frame("Pointing_Up", 0.9, pinch=True)
        # 2 seconds at 32 fps, frames at 0 .. 63/32
        signals = feed(engine, [pinch] * 64)

        clicks = [s.click_event for s in signals if s.clicked]
        assert clicks == [0.0, 1.0]

    def test_cooldown_runs_without_hand(self, engine, make_frame):
        pinch = make_frame("Pointing_Up", 0.9, pinch=True)
        engine.process_frame(pinch, now=0.0)
        engine.process_frame(HandFrame.empty(), now=0.5)

        assert engine.process_frame(pinch, now=1.0).clicked

    def test_click_during_photo_modal(self, engine, make_frame):
        signal = engine.process_frame(make_frame("Pointing_Up", 0.9, pinch=True),
                                      now=0.0, photo_modal_open=True)

        assert signal.clicked

    def test_click_and_transition_same_frame(self, formed_engine, make_frame):
        frames = [make_frame("Open_Palm", 0.9)] * 10 + [make_frame("Open_Palm", 0.9, pinch=True)]
        signals = feed(formed_engine, frames)

        assert signals[-1].mode_changed
        assert signals[-1].clicked


class TestPointer:

    def test_pointer_is_mirrored_index_tip(self, engine, make_frame):
        frame = make_frame("Pointing_Up", 0.9)
        tip = frame.primary.landmarks[8]

        signal = engine.process_frame(frame, now=0.0)

        assert signal.pointer == pytest.approx((1.0 - tip.x, tip.y))

    def test_pointer_with_low_confidence(self, engine, make_frame):
        signal = engine.process_frame(make_frame("Open_Palm", 0.1), now=0.0)

        assert signal.pointer is not None

    def test_fist_hides_pointer(self, engine, make_frame):
        signal = engine.process_frame(make_frame("Closed_Fist", 0.9), now=0.0)

        assert signal.pointer is None

    def test_low_confidence_fist_keeps_pointer(self, engine, make_frame):
        signal = engine.process_frame(make_frame("Closed_Fist", 0.4), now=0.0)

        assert signal.pointer is not None


class TestHandLoss:
    """No hand degrades to a neutral signal."""

    def test_neutral_signal(self, engine):
        signal = engine.process_frame(HandFrame.empty(), now=0.0)

        assert signal.pointer is None
        assert signal.click_event is None
        assert signal.motion is None
        assert signal.zoom_delta is None
        assert signal.mode == InteractionMode.CHAOS
        assert signal.feedback_color == FeedbackColor.IDLE
        assert not signal.has_hand

    def test_none_frame_is_no_hand(self, engine):
        assert engine.process_frame(None, now=0.0).pointer is None

    def test_mode_kept(self, formed_engine):
        signals = feed(formed_engine, [HandFrame.empty()] * 20)

        assert all(s.mode == InteractionMode.FORMED for s in signals)

    def test_reacquired_hand_has_zero_delta(self, engine, make_frame):
        engine.process_frame(make_frame("Open_Palm", 0.9, cx=0.3), now=0.0)
        engine.process_frame(HandFrame.empty(), now=DT)
        signal = engine.process_frame(make_frame("Open_Palm", 0.9, cx=0.7), now=2 * DT)

        assert signal.motion.dx == 0.0
        assert signal.motion.dy == 0.0
        assert not signal.motion.is_moving
        assert signal.rotation_boost == 0.0

    def test_motion_without_loss(self, engine, make_frame):
        engine.process_frame(make_frame("Open_Palm", 0.9, cx=0.3, cy=0.5), now=0.0)
        signal = engine.process_frame(make_frame("Open_Palm", 0.9, cx=0.32, cy=0.51), now=DT)

        assert signal.motion.dx == pytest.approx(-0.02)
        assert signal.motion.dy == pytest.approx(0.01)
        assert signal.motion.is_moving

    def test_streak_survives_hand_loss(self, engine, make_frame):
        fist = make_frame("Closed_Fist", 0.9)
        frames = [fist] * 3 + [HandFrame.empty()] + [fist] * 3
        signals = feed(engine, frames)

        assert signals[-2].mode == InteractionMode.CHAOS
        assert signals[-1].mode == InteractionMode.FORMED


class TestPhotoModal:
    """An open photo overlay suppresses mode rules only."""

    def test_no_transition(self, engine, make_frame):
        signals = feed(engine, [make_frame("Closed_Fist", 0.9)] * 12, photo_modal_open=True)

        assert all(s.mode == InteractionMode.CHAOS for s in signals)
        assert engine.state.streak.count == 0

    def test_no_dissolve(self, formed_engine, make_frame):
        feed(formed_engine, [make_frame("Open_Palm", 0.9)] * 20, photo_modal_open=True)

        assert formed_engine.state.mode == InteractionMode.FORMED

    def test_pointer_and_motion_still_run(self, engine, make_frame):
        feed(engine, [make_frame("Open_Palm", 0.9, cx=0.3)], photo_modal_open=True)
        signal = engine.process_frame(make_frame("Open_Palm", 0.9, cx=0.35),
                                      now=DT, photo_modal_open=True)

        assert signal.pointer is not None
        assert signal.motion.dx == pytest.approx(-0.05)
        assert signal.rotation_boost == 0.0

    def test_streak_resumes_after_close(self, engine, make_frame):
        fist = make_frame("Closed_Fist", 0.9)
        feed(engine, [fist] * 3)
        feed(engine, [fist] * 5, start=1.0, photo_modal_open=True)
        signals = feed(engine, [fist] * 3, start=2.0)

        assert [s.mode for s in signals] == [InteractionMode.CHAOS, InteractionMode.CHAOS,
                                             InteractionMode.FORMED]


class TestZoom:
    """Two-hand spread delta."""

    def test_single_hand_has_no_zoom(self, engine, make_frame):
        assert engine.process_frame(make_frame(), now=0.0).zoom_delta is None

    def test_spread_delta(self, engine, make_frame, make_hand):
        first = engine.process_frame(
            make_frame(hands=[make_hand(cx=0.3), make_hand(cx=0.7)]), now=0.0)
        second = engine.process_frame(
            make_frame(hands=[make_hand(cx=0.2), make_hand(cx=0.8)]), now=DT)

        assert first.zoom_delta == 0.0
        assert first.hand_count == 2
        assert second.zoom_delta == pytest.approx(0.2)

    def test_spread_baseline_cleared_by_second_hand_loss(self, engine, make_frame, make_hand):
        engine.process_frame(make_frame(hands=[make_hand(cx=0.3), make_hand(cx=0.7)]), now=0.0)
        engine.process_frame(make_frame(hands=[make_hand(cx=0.3)]), now=DT)
        signal = engine.process_frame(
            make_frame(hands=[make_hand(cx=0.1), make_hand(cx=0.9)]), now=2 * DT)

        assert signal.zoom_delta == 0.0


class TestEvents:

    @pytest.fixture
    def bus(self):
        return EventBus()

    def test_mode_and_click_events(self, bus, make_frame):
        received = []
        bus.subscribe(Events.MODE_CHANGED, lambda mode, timestamp: received.append(("mode", mode)))
        bus.subscribe(Events.CLICK, lambda timestamp, pointer: received.append(("click", timestamp)))
        engine = InteractionEngine(event_bus=bus)

        feed(engine, [make_frame("Closed_Fist", 0.9)] * 6)
        engine.process_frame(make_frame("Pointing_Up", 0.9, pinch=True), now=3.0)

        assert received == [("mode", InteractionMode.FORMED), ("click", 3.0)]

    def test_control_signal_every_frame(self, bus, make_frame):
        signals = []
        bus.subscribe(Events.CONTROL_SIGNAL, lambda signal: signals.append(signal))
        engine = InteractionEngine(event_bus=bus)

        returned = feed(engine, [make_frame(), HandFrame.empty(), make_frame()])

        assert signals == returned

    def test_hand_lost_once(self, bus, make_frame):
        lost = []
        bus.subscribe(Events.HAND_LOST, lambda timestamp: lost.append(timestamp))
        engine = InteractionEngine(event_bus=bus)

        feed(engine, [make_frame(), HandFrame.empty(), HandFrame.empty(), make_frame(), HandFrame.empty()])

        assert lost == [DT, 4 * DT]

    def test_hand_presence_settled_before_listeners(self, bus, make_frame):
        """A listener driving the next frame sees this frame's hand already recorded."""
        lost = []
        bus.subscribe(Events.HAND_LOST, lambda timestamp: lost.append(timestamp))
        engine = InteractionEngine(event_bus=bus)

        def next_frame(signal):
            if signal.has_hand:
                engine.process_frame(HandFrame.empty(), now=signal.timestamp + DT)

        bus.subscribe(Events.CONTROL_SIGNAL, next_frame)
        engine.process_frame(make_frame(), now=0.0)

        assert lost == [DT]
        assert not engine._had_hand

    def test_failing_listener_does_not_abort_frame(self, bus, make_frame):
        def broken(**_):
            raise ValueError("listener bug")

        bus.subscribe(Events.CONTROL_SIGNAL, broken)
        engine = InteractionEngine(event_bus=bus)

        signal = engine.process_frame(make_frame(), now=0.0)

        assert signal.has_hand


class TestEngineMisc:

    def test_not_reentrant(self, engine, make_frame):
        engine._busy.acquire()
        try:
            with pytest.raises(RuntimeError):
                engine.process_frame(make_frame(), now=0.0)
        finally:
            engine._busy.release()

    def test_concurrent_driver_rejected(self, make_frame):
        """A second thread calling in while a frame is in flight is rejected."""
        entered = threading.Event()
        release = threading.Event()
        errors = []

        engine = InteractionEngine()
        classify = engine.classifier.classify

        def slow_classify(*args):
            entered.set()
            release.wait(timeout=2.0)
            return classify(*args)

        engine.classifier.classify = slow_classify

        worker = threading.Thread(target=lambda: engine.process_frame(make_frame(), now=0.0))
        worker.start()
        assert entered.wait(timeout=2.0)
        try:
            engine.process_frame(make_frame(), now=DT)
        except RuntimeError as e:
            errors.append(e)
        finally:
            release.set()
            worker.join(timeout=2.0)

        assert len(errors) == 1

    def test_negative_elapsed_is_ignored(self, engine, make_frame):
        pinch = make_frame("Pointing_Up", 0.9, pinch=True)
        engine.process_frame(pinch, now=10.0)
        engine.process_frame(pinch, now=5.0)

        assert engine.clicks.remaining == 1.0

    def test_reset(self, engine, make_frame):
        feed(engine, [make_frame("Closed_Fist", 0.9)] * 6)
        engine.process_frame(make_frame("Pointing_Up", 0.9, pinch=True), now=1.0)

        engine.reset()

        assert engine.state.mode == InteractionMode.CHAOS
        assert engine.state.click_cooldown == 0.0
        assert engine.state.streak.count == 0
        assert engine.state.baseline.palm_centroid is None
        assert engine.process_frame(make_frame("Pointing_Up", 0.9, pinch=True), now=1.1).clicked

    def test_custom_thresholds(self, make_frame):
        engine = InteractionEngine(interaction=InteractionConfig(reform_frames=2))

        signals = feed(engine, [make_frame("Closed_Fist", 0.9)] * 3)

        assert signals[-1].mode == InteractionMode.FORMED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
