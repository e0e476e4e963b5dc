"""Bit-phase recovery and per-second symbol detection from the pulse train."""

from dataclasses import dataclass, field

from .history import RingHistory
from .intmath import clip, trunc_div
from .phase import ONE, PHASE_PERIOD, JjyBit, phase_add, phase_diff, phase_follow
from .timing import LazyTimer

NUM_PHASE_CANDS = 10

_SLOT_BOUNDS = tuple(PHASE_PERIOD * pct // 100 for pct in (20, 35, 50, 65, 80))

_PATTERNS = {
    0b100000: JjyBit.MARKER,
    0b111000: JjyBit.ONE,
    0b111110: JjyBit.ZERO,
}


@dataclass
class PhaseCandidate:
    """A candidate second-boundary phase with its confidence score."""

    phase: int = 0
    score: int = 0
    valid: bool = False


def _new_candidates() -> list[PhaseCandidate]:
    return [PhaseCandidate() for _ in range(NUM_PHASE_CANDS)]


@dataclass
class SyncStatus:
    """Observable synchroniser state."""

    phase_cands: list[PhaseCandidate] = field(default_factory=_new_candidates)
    phase_cursor: int = 0
    phase_offset: int = 0
    phase_locked: bool = False
    phase_lock_progress: int = 0
    bit_det_quality: int = 0
    out_enable: bool = False
    out_value: JjyBit = JjyBit.ERROR


class Synchronizer:
    """Locks onto the rising edge of each second and classifies the pulse width."""

    CAND_EXPIRE_TIME_MS = 1200
    LOCK_WAIT_TIME_MS = 1024 * 5
    SCORE_MAX = 10
    SCORE_ADD = 3
    NEAR_THRESH = PHASE_PERIOD // 20
    BITDET_SREG_INITVAL = 0x55555555
    BITDET_NUM_SLOTS = 6
    BITDET_OK_THRESH = 10
    QUALITY_PERIOD_SEC = 3

    def __init__(self) -> None:
        self.status = SyncStatus()
        self._qty_history_waveform = RingHistory(self.BITDET_NUM_SLOTS * self.QUALITY_PERIOD_SEC)
        self._qty_history_bit_error = RingHistory(self.QUALITY_PERIOD_SEC)
        self._cand_update_timer = LazyTimer(1000)
        self._cand_expire_timer = LazyTimer(self.CAND_EXPIRE_TIME_MS, auto_loop=False)
        self._lock_wait_timer = LazyTimer(self.LOCK_WAIT_TIME_MS, auto_loop=False)
        self.init(0)

    def init(self, t_now_ms: int) -> None:
        """Forget every candidate and restart the lock wait."""
        self.t_last_ms = t_now_ms
        self.last_in = 0

        self._cand_update_timer.start(t_now_ms)
        self._cand_expire_timer.set_expired()
        self._lock_wait_timer.start(t_now_ms)
        self.phase_last_cand_index = -1

        self.bitdet_last_slot = 0
        self.bitdet_hi_count = 0
        self.bitdet_lo_count = 0
        self.bitdet_sreg = self.BITDET_SREG_INITVAL

        self._qty_history_waveform.clear(0, True)
        self._qty_history_bit_error.clear(0, True)

        sts = self.status
        for cand in sts.phase_cands:
            cand.valid = False
            cand.phase = 0
        sts.phase_offset = 0
        sts.phase_cursor = (t_now_ms % 1000) * PHASE_PERIOD // 1000
        sts.phase_locked = False
        sts.phase_lock_progress = 0
        sts.bit_det_quality = 0

    def process(self, t_now_ms: int, signal: int) -> JjyBit | None:
        """Feed one digital sample; returns a symbol at each locked second boundary."""
        t_delta = (t_now_ms - self.t_last_ms) & 0xFFFFFFFF
        self.t_last_ms = t_now_ms
        if t_delta == 0:
            return None

        sts = self.status
        phase = (t_now_ms % 1000) * PHASE_PERIOD // 1000
        sts.phase_cursor = phase

        cand_upd = self._cand_update_timer.is_expired(t_now_ms)

        # Let every candidate decay once a second.
        if cand_upd:
            num_valid = 0
            for cand in sts.phase_cands:
                if not cand.valid:
                    continue
                cand.score -= 1
                cand.valid = cand.score > 0
                if cand.valid:
                    num_valid += 1
            if num_valid == 0:
                self._cand_expire_timer.set_expired()

        rise = bool(signal) and not self.last_in
        self.last_in = 1 if signal else 0
        if rise:
            self.add_edge(phase)

        if cand_upd or rise:
            self._select_candidate(t_now_ms)

        if self._cand_expire_timer.is_expired(t_now_ms):
            self._lock_wait_timer.start(t_now_ms)
            sts.phase_lock_progress = 0
        else:
            sts.phase_locked = self._lock_wait_timer.is_expired(t_now_ms)
            if sts.phase_locked:
                sts.phase_lock_progress = ONE
            else:
                elapsed_ms = self._lock_wait_timer.elapsed(t_now_ms)
                sts.phase_lock_progress = clip(
                    0, ONE, trunc_div(elapsed_ms * ONE, self.LOCK_WAIT_TIME_MS)
                )

        return self.detect_bit(signal, phase)

    def _select_candidate(self, t_now_ms: int) -> None:
        sts = self.status
        best_index = -1
        best_score = -1
        best_phase = 0
        for i, cand in enumerate(sts.phase_cands):
            if cand.valid and cand.score >= best_score:
                best_index, best_score, best_phase = i, cand.score, cand.phase

        if best_index < 0:
            self._cand_expire_timer.set_expired()
        elif best_index == self.phase_last_cand_index:
            self._cand_expire_timer.start(t_now_ms)
            sts.phase_offset = best_phase
        else:
            self._cand_expire_timer.set_expired()
            sts.phase_offset = best_phase
        self.phase_last_cand_index = best_index

    def detect_bit(self, signal: int, phase: int) -> JjyBit | None:
        """Sample the pulse in six slots per second; returns a symbol when one completes."""
        sts = self.status
        bit_phase = phase_add(phase, -sts.phase_offset)
        slot = sum(1 for bound in _SLOT_BOUNDS if bit_phase >= bound)

        slot_changed = slot != self.bitdet_last_slot
        unexpected = slot_changed and slot != (self.bitdet_last_slot + 1) % self.BITDET_NUM_SLOTS
        self.bitdet_last_slot = slot

        enabled = False
        value = JjyBit.ERROR
        if not slot_changed:
            if signal:
                self.bitdet_hi_count += 1
            else:
                self.bitdet_lo_count += 1
        elif unexpected:
            self.bitdet_hi_count = 0
            self.bitdet_lo_count = 0
            self.bitdet_sreg = self.BITDET_SREG_INITVAL
            sts.bit_det_quality = trunc_div(sts.bit_det_quality, 2)
            self._qty_history_bit_error.push(0)
            self._qty_history_waveform.push(0)
        else:
            hi = 1 if self.bitdet_hi_count > self.bitdet_lo_count else 0
            self.bitdet_sreg = ((self.bitdet_sreg << 1) | hi) & ((1 << self.BITDET_NUM_SLOTS) - 1)

            total = self.bitdet_hi_count + self.bitdet_lo_count
            margin = abs(self.bitdet_hi_count - self.bitdet_lo_count) * ONE
            self._qty_history_waveform.push(trunc_div(margin, total) if total else 0)

            enabled = slot == 0
            if enabled:
                value = _PATTERNS.get(self.bitdet_sreg, JjyBit.ERROR)
                self._qty_history_bit_error.push(ONE if value != JjyBit.ERROR else 0)

            self.bitdet_hi_count = 0
            self.bitdet_lo_count = 0

        sts.bit_det_quality = trunc_div(
            self._qty_history_waveform.ave() * self._qty_history_bit_error.ave(), ONE
        )
        sts.out_value = value
        sts.out_enable = enabled and sts.phase_locked
        return value if sts.out_enable else None

    def add_edge(self, phase: int) -> None:
        """Reinforce a nearby candidate with a rising edge, or register a new one."""
        cands = self.status.phase_cands

        found = False
        for cand in cands:
            if not cand.valid:
                continue
            if abs(phase_diff(phase, cand.phase)) < self.NEAR_THRESH:
                ratio = ONE // (2 + cand.score * 8 // self.SCORE_MAX)
                cand.phase = phase_follow(cand.phase, phase, ratio)
                cand.score = min(self.SCORE_MAX, cand.score + self.SCORE_ADD)
                found = True
                break

        if not found:
            for cand in cands:
                if not cand.valid:
                    cand.valid = True
                    cand.score = self.SCORE_ADD
                    cand.phase = phase
                    break
            return

        # Merge the closest pair of candidates that have drifted together.
        nearest: tuple[int, int] | None = None
        nearest_diff = PHASE_PERIOD
        for ia in range(NUM_PHASE_CANDS - 1):
            cand_a = cands[ia]
            if not cand_a.valid:
                continue
            for ib in range(ia + 1, NUM_PHASE_CANDS):
                cand_b = cands[ib]
                if not cand_b.valid:
                    continue
                diff = phase_diff(cand_b.phase, cand_a.phase)
                if abs(diff) >= self.NEAR_THRESH:
                    continue
                if abs(diff) < abs(nearest_diff):
                    nearest = (ia, ib)
                    nearest_diff = diff
        if nearest is not None:
            cand_a, cand_b = cands[nearest[0]], cands[nearest[1]]
            cand_a.phase = phase_add(
                cand_a.phase,
                trunc_div(nearest_diff * cand_b.score, cand_a.score + cand_b.score),
            )
            cand_a.score = min(self.SCORE_MAX, cand_a.score + cand_b.score)
            cand_b.valid = False
            cand_b.score = 0