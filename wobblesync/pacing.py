#!/usr/bin/env python3

# Imports {{{
# builtins
import logging
import time
from typing import Callable, Optional

# local modules
from wobblesync.constants import DEFAULT_SETTINGS

# }}}


log = logging.getLogger(__name__)


class Pacer(object):
    """
    Keeps successive writes to the Wobble service at least `delay` seconds
    apart.

    Call wait() right before every mutating step. The first call never blocks.
    """

    def __init__(
        self,
        delay: float = DEFAULT_SETTINGS["pacing_delay"],
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.delay = delay
        self.sleep = sleep
        self.clock = clock
        self._last: Optional[float] = None

    def wait(self):
        if self._last is not None:
            remaining = self.delay - (self.clock() - self._last)
            if remaining > 0:
                log.debug(f"Pacing: sleeping {remaining:.2f}s")
                self.sleep(remaining)
        self._last = self.clock()


class NullPacer(Pacer):
    def __init__(self):
        super().__init__(delay=0)

    def wait(self):
        ...
