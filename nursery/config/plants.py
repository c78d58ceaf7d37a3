"""Plant lifecycle, growth and greenhouse configuration constants."""

# Stage progress thresholds (progress units needed to leave a stage)
SEED_STAGE_THRESHOLD = 25.0  # Seed -> Growing
GROWING_STAGE_THRESHOLD = 75.0  # Growing -> Ripe
RIPE_STAGE_THRESHOLD = 50.0  # Ripe -> Dead (over-ripening)

# Stage growth factors (multiply the species base rate)
SEED_GROWTH_FACTOR = 1.0
GROWING_GROWTH_FACTOR = 1.0
RIPE_GROWTH_FACTOR = 0.2  # Ripe produce ages slowly
DEAD_GROWTH_FACTOR = 0.0

# Growth cycles
NORMAL_MULTIPLIER = 1.0
BOOST_MULTIPLIER = 2.0
BOOST_DURATION = 30.0  # Seconds a fertilized plant stays boosted

# Resources (moisture and nutrients share the same 0..100 scale)
MAX_RESOURCE_LEVEL = 100.0
INITIAL_MOISTURE = 60.0
INITIAL_NUTRIENTS = 60.0
LOW_RESOURCE_LEVEL = 10.0  # Below this the plant struggles
LOW_RESOURCE_VIGOR = 0.2  # Growth multiplier while struggling

# Resource consumption per simulated second: (moisture, nutrients)
SEED_CONSUMPTION = (0.25, 0.125)
GROWING_CONSUMPTION = (0.5, 0.25)
RIPE_CONSUMPTION = (0.15, 0.075)

# Removal of dead plants
DEAD_PLANT_EXPIRY = 30.0  # Seconds a dead plant stays on its plot

# Worker actions
WATER_AMOUNT = 50.0
FERTILIZE_AMOUNT = 50.0
WATER_WORKER_MOISTURE_CEILING = 95.0  # Water workers skip plants above this

# Greenhouse plots
GREENHOUSE_CAPACITY = 16
GREENHOUSE_MAX_CAPACITY = 128
