"""Store, inventory and worker economy constants."""

STARTING_FUNDS = 500.0
SEED_PRICE_RATIO = 0.4  # Seed price as a fraction of produce sell price
HARVEST_YIELD = 1  # Units of produce credited per harvested plant

# Store rating (0..5 stars)
STARTING_RATING = 3.0
MAX_RATING = 5.0
RATING_SALE_GAIN = 0.1
RATING_VIP_SALE_GAIN = 0.2
RATING_FAILED_SALE_LOSS = 0.2
RATING_THEFT_LOSS = 0.3

# Patrols
PATROL_DURATION = 20.0  # Seconds a patrol keeps the store guarded

# Hiring costs by worker role
WORKER_HIRE_COSTS = {
    "water": 200.0,
    "fertilize": 300.0,
    "harvest": 500.0,
}

# Commands kept in the executed-command log
COMMAND_LOG_SIZE = 200

# Mementos kept per entity by the caretaker
MAX_UNDO_HISTORY = 100

# Worker experience: each level needs this many more successful commands
WORKER_LEVEL_UP_COMMANDS = 10
WORKER_MAX_LEVEL = 5
WORKER_LEVEL_BONUS = 0.25  # Extra water/fertilizer per level above 1
