"""
Drives the CPU from a single real-time source at two rates: instructions
at the configured clock speed, and the timers plus the redraw signal at a
fixed 60Hz. The instruction budget of each 60Hz tick is clock_hz / 60; the
fractional part is carried over in integer arithmetic so the two rates
never drift apart.
"""
import logging
import threading
import time

from chip8.addresses import DEFAULT_CLOCK_HZ, TIMER_HZ
from chip8.exception import Chip8Error, ConfigurationError

logger = logging.getLogger(__name__)

NANOS_IN_SECOND = 1000000000

# Catch up at most this much real time per loop, e.g. after the process was
# suspended
MAX_FRAME_NANOS = NANOS_IN_SECOND // 10

# Sleeping is this inaccurate; the rest of a frame is spent yielding
SLEEP_SLACK_NANOS = 1020000


class Scheduler(object):
    """
    Runs a CPU at clock_hz instructions per second and ticks its timers at
    60Hz. on_redraw, when given, is called with no arguments whenever the
    display should be presented: once per tick if the display changed
    when draw_sync is on, or right after every cycle that changed it when
    draw_sync is off. Only the presentation is affected by draw_sync.
    """
    def __init__(self, cpu, clock_hz=DEFAULT_CLOCK_HZ, draw_sync=True, on_redraw=None):
        if clock_hz <= 0:
            raise ConfigurationError("Clock speed must be positive, got {}".format(clock_hz))
        self.cpu = cpu
        self.clock_hz = clock_hz
        self.draw_sync = draw_sync
        self.on_redraw = on_redraw
        self.ticks = 0
        self.cycles = 0
        self.error = None
        # Pending instruction cycles, in units of 1/60 cycle
        self._cycle_credit = 0
        # Pending real time, in units of 1/60 nanosecond
        self._time_credit = 0

    def tick(self):
        """
        Run one 60Hz step: this tick's share of instruction cycles, then one
        timer decrement, then the redraw signal.

        :return: the number of instruction cycles run
        """
        self._cycle_credit += self.clock_hz
        cycle_count, self._cycle_credit = divmod(self._cycle_credit, TIMER_HZ)

        for _ in range(cycle_count):
            self.cpu.cycle()
            self.cycles += 1
            if not self.draw_sync and self.cpu.cpu_display.take_dirty():
                self._redraw()

        self.cpu.timer_tick()
        self.ticks += 1
        if self.draw_sync and self.cpu.cpu_display.take_dirty():
            self._redraw()
        return cycle_count

    def advance(self, elapsed_nanos):
        """
        Account for elapsed real time and run every whole tick it covers.
        Time short of a full tick is kept for the next call.

        :param elapsed_nanos: real time since the last call, in nanoseconds
        :return: the number of ticks run
        """
        self._time_credit += elapsed_nanos * TIMER_HZ
        tick_count, self._time_credit = divmod(self._time_credit, NANOS_IN_SECOND)
        for _ in range(tick_count):
            self.tick()
        return tick_count

    def nanos_until_next_tick(self):
        return -(-(NANOS_IN_SECOND - self._time_credit) // TIMER_HZ)

    def run(self, stop_event=None, clock=time.perf_counter_ns, sleep=time.sleep):
        """
        Run in real time until stop_event is set or the session fails. Meant
        to be the body of the emulation thread. Any failure, including an
        unexpected exception, is logged with the CPU registers and kept on
        self.error for the host to report.

        :param stop_event: a threading.Event that ends the loop when set
        :param clock: monotonic nanosecond clock
        :param sleep: sleep function taking seconds
        :return: the session-fatal error, or None after a clean stop
        """
        if stop_event is None:
            stop_event = threading.Event()
        last_time = clock()

        try:
            while not stop_event.is_set():
                now = clock()
                elapsed = min(now - last_time, MAX_FRAME_NANOS)
                last_time = now
                self.advance(elapsed)

                remaining = self.nanos_until_next_tick() - (clock() - now)
                if remaining > SLEEP_SLACK_NANOS:
                    sleep((remaining - SLEEP_SLACK_NANOS) / NANOS_IN_SECOND)
                else:
                    sleep(0)
        except Chip8Error as error:
            logger.error("Emulation stopped: %s\n%s", error, self.cpu)
            self.error = error
        except Exception as error:
            logger.exception("Emulation crashed\n%s", self.cpu)
            self.error = error
        return self.error

    def _redraw(self):
        if self.on_redraw is not None:
            self.on_redraw()
