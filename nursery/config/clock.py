"""In-game clock constants."""

START_DAY = 1
START_HOUR = 6  # Opening time on day one
SECONDS_PER_GAME_MINUTE = 1.0  # Simulated seconds per in-game minute

# Nights pass faster
NIGHT_START_HOUR = 20
NIGHT_END_HOUR = 6
NIGHT_SPEEDUP = 10
