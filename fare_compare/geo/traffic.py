"""Time-of-day average speed buckets for duration estimates."""


class TrafficModel:
    """Picks an average city driving speed for a given hour of day."""

    RUSH_HOUR_SPEED_KMH = 18.0
    NIGHT_SPEED_KMH = 35.0
    BASELINE_SPEED_KMH = 25.0

    # [start, end) hour ranges
    RUSH_HOURS = ((7, 10), (16, 20))
    NIGHT_START = 22
    NIGHT_END = 6

    def is_rush_hour(self, hour: int) -> bool:
        return any(start <= hour < end for start, end in self.RUSH_HOURS)

    def is_night(self, hour: int) -> bool:
        # Window wraps past midnight
        return hour >= self.NIGHT_START or hour < self.NIGHT_END

    def speed_kmh(self, hour: int) -> float:
        """Get average speed for given hour (0-23).

        Rush hours win over night hours; the two ranges do not overlap today
        but the order keeps the slow bucket authoritative if they ever do.
        """
        hour = hour % 24
        if self.is_rush_hour(hour):
            return self.RUSH_HOUR_SPEED_KMH
        if self.is_night(hour):
            return self.NIGHT_SPEED_KMH
        return self.BASELINE_SPEED_KMH

    def travel_minutes(self, distance_km: float, hour: int) -> float:
        """Minutes to cover distance_km at the bucket speed for hour."""
        return distance_km / self.speed_kmh(hour) * 60.0
