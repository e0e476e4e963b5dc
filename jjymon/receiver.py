"""The complete receiver: RF chain, bit synchroniser and frame decoder."""

from collections.abc import Sequence

from .decoder import Action, Decoder
from .phase import Frequency
from .radio import Rf
from .synchronizer import Synchronizer


class Receiver:
    """Turns blocks of ADC samples into decoded time-code frames."""

    def __init__(self) -> None:
        self.rf = Rf()
        self.sync = Synchronizer()
        self.dec = Decoder()

    def init(self, freq: Frequency, t_now_ms: int) -> None:
        """Reset every stage and select the carrier."""
        self.rf.init(freq, t_now_ms)
        self.sync.init(t_now_ms)
        self.dec.init(t_now_ms)

    def process(self, t_now_ms: int, samples: Sequence[int]) -> Action | None:
        """Process one block; returns the decoder action when a bit was produced."""
        signal = self.rf.process(t_now_ms, samples)
        bit = self.sync.process(t_now_ms, signal)
        if bit is None:
            return None
        return self.dec.process(t_now_ms, bit)