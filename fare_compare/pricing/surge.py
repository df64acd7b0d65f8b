"""Time-dependent surge windows.

Base surge by hour of day (first matching window wins):

    07:00-10:00           morning rush    1.25
    16:00-20:00           evening rush    1.35
    23:00-05:00           late night      1.20
    Friday 12:00-14:00    friday midday   1.15

A weekend window (Thursday from 18:00, all of Friday) stacks a further
x1.10 on top. Each provider passes on only part of the surge:
``1 + (base - 1) * damping``.
"""

from datetime import datetime

THURSDAY = 3  # datetime.weekday()
FRIDAY = 4


class SurgeSchedule:
    MORNING_RUSH = (7, 10, 1.25)
    EVENING_RUSH = (16, 20, 1.35)
    LATE_NIGHT_START = 23
    LATE_NIGHT_END = 5
    LATE_NIGHT_SURGE = 1.20
    FRIDAY_MIDDAY = (12, 14, 1.15)
    WEEKEND_SURGE = 1.10
    WEEKEND_THURSDAY_FROM = 18

    def base_surge(self, trip_time: datetime) -> float:
        """Market-wide surge before provider damping."""
        hour = trip_time.hour
        weekday = trip_time.weekday()

        surge = 1.0
        start, end, value = self.MORNING_RUSH
        if start <= hour < end:
            surge = value
        elif self.EVENING_RUSH[0] <= hour < self.EVENING_RUSH[1]:
            surge = self.EVENING_RUSH[2]
        elif hour >= self.LATE_NIGHT_START or hour < self.LATE_NIGHT_END:
            surge = self.LATE_NIGHT_SURGE
        elif weekday == FRIDAY and self.FRIDAY_MIDDAY[0] <= hour < self.FRIDAY_MIDDAY[1]:
            surge = self.FRIDAY_MIDDAY[2]

        if self._in_weekend_window(trip_time):
            surge *= self.WEEKEND_SURGE

        return surge

    def provider_surge(self, trip_time: datetime, damping: float) -> float:
        """Surge for a provider that passes on `damping` of the market surge."""
        if not 0.0 <= damping <= 1.0:
            raise ValueError("Surge damping must be within [0, 1]")
        base = self.base_surge(trip_time)
        return 1 + (base - 1) * damping

    def is_surge_time(self, trip_time: datetime) -> bool:
        """True during the daily rush and late-night windows."""
        hour = trip_time.hour
        return (
            self.MORNING_RUSH[0] <= hour < self.MORNING_RUSH[1]
            or self.EVENING_RUSH[0] <= hour < self.EVENING_RUSH[1]
            or hour >= self.LATE_NIGHT_START
            or hour < self.LATE_NIGHT_END
        )

    def describe(self, trip_time: datetime) -> str | None:
        """Label of the surge window covering trip_time, for display."""
        hour = trip_time.hour
        if self.MORNING_RUSH[0] <= hour < self.MORNING_RUSH[1]:
            return "morning_rush"
        if self.EVENING_RUSH[0] <= hour < self.EVENING_RUSH[1]:
            return "evening_rush"
        if hour >= self.LATE_NIGHT_START or hour < self.LATE_NIGHT_END:
            return "late_night"
        if trip_time.weekday() == FRIDAY and self.FRIDAY_MIDDAY[0] <= hour < self.FRIDAY_MIDDAY[1]:
            return "friday_midday"
        if self._in_weekend_window(trip_time):
            return "weekend"
        return None

    def _in_weekend_window(self, trip_time: datetime) -> bool:
        weekday = trip_time.weekday()
        return (
            weekday == THURSDAY and trip_time.hour >= self.WEEKEND_THURSDAY_FROM
        ) or weekday == FRIDAY
