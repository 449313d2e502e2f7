from chipvm.runtime.timers import Timers, TimerClock


def test_delay_decays_to_zero():
    timers = Timers()
    timers.delay = 10

    for _ in range(10):
        timers.tick()

    assert timers.delay == 0

    timers.tick()
    assert timers.delay == 0


def test_timers_are_independent():
    timers = Timers()
    timers.delay = 3
    timers.sound = 1

    timers.tick()

    assert timers.delay == 2
    assert timers.sound == 0


def test_sound_stop_boundary():
    stops = []
    timers = Timers(on_sound_stop=lambda: stops.append(True))
    timers.sound = 2

    assert timers.sound_active
    assert not timers.tick()
    assert timers.tick()
    assert not timers.sound_active
    assert not timers.tick()
    assert stops == [True]


def test_timer_values_are_bytes():
    timers = Timers()
    timers.delay = 0x1FF
    timers.sound = 0x100

    assert timers.delay == 0xFF
    assert timers.sound == 0x00


def test_timer_clock_cadence():
    clock = TimerClock(0.0, period_ms=16)

    assert not clock.due(0.010)
    assert clock.due(0.020)
    assert not clock.due(0.030)
    assert clock.due(0.040)


def test_timer_clock_keeps_sixty_hertz():
    clock = TimerClock(0.0, period_ms=16)

    ticks = sum(clock.due(k * 0.010) for k in range(1, 101))

    assert 61 <= ticks <= 62


def test_timer_clock_resyncs_after_stall():
    clock = TimerClock(0.0, period_ms=16)

    assert clock.due(5.0)
    assert not clock.due(5.010)
    assert clock.due(5.020)
