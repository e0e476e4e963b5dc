"""Frame synchronisation and decoding of the received bit stream."""

from dataclasses import dataclass, field
from enum import Enum

from .phase import JjyBit
from .timecode import JjyDateTime, ParseError

FRAME_BITS = 60


class Action(Enum):
    """What the decoder did with the last bit."""

    ABORT = 0
    SYNC_POS_MARKER = 1
    SYNC_MARKER = 2
    TICK_CONTINUE = 3
    TICK_WRAP = 4


@dataclass
class DecoderStatus:
    """Observable decoder state."""

    toggle: bool = False
    synced: bool = False
    last_action: Action = Action.ABORT
    last_bit_index: int = 0
    last_bit_value: JjyBit = JjyBit.ERROR
    last_date_time: JjyDateTime = field(default_factory=JjyDateTime)
    last_parse_result: ParseError = ParseError.EMPTY

    def reset(self) -> None:
        """Forget synchronisation and the last result."""
        self.last_action = Action.ABORT
        self.synced = False
        self.last_bit_index = 0
        self.last_bit_value = JjyBit.ERROR
        self.last_parse_result = ParseError.EMPTY


class Decoder:
    """Aligns to the frame markers and parses each complete minute."""

    INITIAL_BIT_INDEX = FRAME_BITS - 1

    def __init__(self) -> None:
        self.status = DecoderStatus()
        self._rx_buff = [JjyBit.ERROR] * FRAME_BITS
        self._bit_index = self.INITIAL_BIT_INDEX
        self.init(0)

    def init(self, t_now_ms: int) -> None:
        """Reset to the unsynchronised state."""
        self.status.reset()
        self._rx_buff = [JjyBit.ERROR] * FRAME_BITS
        self._bit_index = self.INITIAL_BIT_INDEX

    def _classify(self, bit: JjyBit) -> Action:
        index = self._bit_index
        if bit == JjyBit.ERROR:
            return Action.ABORT
        if not self.status.synced:
            if index == self.INITIAL_BIT_INDEX and bit == JjyBit.MARKER:
                return Action.SYNC_POS_MARKER
            if index == 0 and bit == JjyBit.MARKER:
                return Action.SYNC_MARKER
            return Action.ABORT
        units = index % 10
        if index == 0 and bit == JjyBit.MARKER:
            return Action.TICK_CONTINUE
        if index == FRAME_BITS - 1 and bit == JjyBit.MARKER:
            return Action.TICK_WRAP
        if units < 9 and bit != JjyBit.MARKER:
            return Action.TICK_CONTINUE
        if units == 9 and bit == JjyBit.MARKER:
            return Action.TICK_CONTINUE
        return Action.ABORT

    def process(self, t_now_ms: int, bit: JjyBit) -> Action:
        """Feed one received bit; returns the resulting action."""
        sts = self.status
        sts.last_bit_index = self._bit_index
        action = self._classify(bit)

        accept = True
        if action is Action.SYNC_POS_MARKER:
            self._bit_index = 0
            sts.synced = False
            accept = False
        elif action is Action.SYNC_MARKER:
            self._bit_index = 1
            sts.synced = True
        elif action is Action.TICK_CONTINUE:
            self._bit_index += 1
            sts.synced = True
        elif action is Action.TICK_WRAP:
            self._bit_index = 0
            sts.synced = True
        else:
            self._bit_index = self.INITIAL_BIT_INDEX
            sts.synced = False
            accept = False

        if accept and 0 <= sts.last_bit_index < FRAME_BITS:
            self._rx_buff[sts.last_bit_index] = bit
            if action is Action.TICK_WRAP:
                sts.last_parse_result = sts.last_date_time.parse(self._rx_buff, 2000)
                sts.last_date_time.add_seconds(60)

        sts.last_bit_value = bit
        sts.last_action = action
        sts.toggle = not sts.toggle
        return action