"""A polling timer driven by externally supplied timestamps."""


class LazyTimer:
    """Expires at ``t_next``; optionally re-arms itself one period later."""

    def __init__(self, period: int, auto_loop: bool = True) -> None:
        self.period = period
        self.auto_loop = auto_loop
        self.t_next = 0

    def start(self, t_now: int, phase: int = 0) -> None:
        """Arm the timer to expire one period after ``t_now`` minus ``phase``."""
        self.t_next = t_now + self.period - phase

    def set_expired(self) -> None:
        """Make the timer report expiry on the next check."""
        self.t_next = 0

    def is_expired(self, t_now: int) -> bool:
        """Whether the timer has expired; re-arms it when auto-looping."""
        expired = t_now >= self.t_next
        if self.auto_loop and expired:
            self.t_next += self.period
            if self.t_next < t_now:
                self.t_next = t_now + 1
        return expired

    def elapsed(self, t_now: int) -> int:
        """Time since the current period began."""
        return t_now - (self.t_next - self.period)

    def phase(self, t_now: int) -> int:
        """Elapsed time folded into one period."""
        t_phase = self.elapsed(t_now)
        if t_phase >= self.period:
            t_phase %= self.period
        return t_phase