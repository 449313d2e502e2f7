import logging as lg
from typing import Callable

from chipvm.common.hwconf import TIMER_PERIOD_MS


class Timers:
    ''' Delay and sound countdown counters, decremented at 60Hz by the host '''
    on_sound_stop: Callable[[], None] | None

    def __init__(self, on_sound_stop: Callable[[], None] | None = None):
        self._delay = 0
        self._sound = 0
        self.on_sound_stop = on_sound_stop

    @property
    def delay(self) -> int:
        return self._delay

    @delay.setter
    def delay(self, value: int):
        self._delay = value & 0xFF

    @property
    def sound(self) -> int:
        return self._sound

    @sound.setter
    def sound(self, value: int):
        self._sound = value & 0xFF

    @property
    def sound_active(self) -> bool:
        return self._sound > 0

    def tick(self) -> bool:
        ''' Returns True when the sound timer has just reached zero '''
        if self._delay > 0:
            self._delay -= 1

        if self._sound == 0:
            return False

        self._sound -= 1

        if self._sound > 0:
            return False

        lg.debug('Sound timer expired')

        if self.on_sound_stop is not None:
            self.on_sound_stop()

        return True


class TimerClock:
    ''' Decides when timers are due, independently of instruction cadence '''

    def __init__(self, now: float, period_ms: int = TIMER_PERIOD_MS):
        self.period = period_ms / 1000.0
        self.last = now

    def due(self, now: float) -> bool:
        if now - self.last < self.period:
            return False

        self.last += self.period

        # Fell more than a period behind, e.g. after a stall
        if now - self.last >= self.period:
            self.last = now

        return True
