"""
Per-attempt countdown.

The timer does not read the clock itself: something calls ``tick()`` once per
second (the application ticker in production, the test directly). That keeps
expiry at exactly ``time_limit_minutes * 60`` ticks.
"""

LOW_TIME_SECONDS = 300


class QuizTimer:
    def __init__(self, time_limit_minutes: int):
        self.time_limit_minutes = max(int(time_limit_minutes or 0), 0)
        self.remaining_seconds = self.time_limit_minutes * 60
        self.suspended = False
        self.stopped = not self.enabled
        self.expired = False

    @property
    def enabled(self) -> bool:
        return self.time_limit_minutes > 0

    @property
    def running(self) -> bool:
        return not (self.stopped or self.suspended)

    @property
    def is_low(self) -> bool:
        return self.enabled and 0 < self.remaining_seconds < LOW_TIME_SECONDS

    def tick(self) -> bool:
        """Advance one second. True only on the tick that reaches zero."""
        if not self.running or self.remaining_seconds <= 0:
            return False
        self.remaining_seconds -= 1
        if self.remaining_seconds == 0:
            self.expired = True
            self.stopped = True
            return True
        return False

    def suspend(self) -> None:
        self.suspended = True

    def resume(self) -> None:
        self.suspended = False

    def stop(self) -> None:
        self.stopped = True

    def format_remaining(self) -> str:
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes}:{seconds:02d}"
