"""Customer spawning and behaviour constants."""

SPAWN_INTERVAL = 5.0  # Seconds between customer arrivals
MAX_CUSTOMERS = 5  # Concurrent customers in the store

# Random factory weights by customer type
SPAWN_WEIGHTS = {
    "regular": 0.6,
    "vip": 0.25,
    "robber": 0.15,
}

# Seconds a customer spends in the store before being served
REGULAR_PATIENCE = 2.0
VIP_PATIENCE = 1.0
ROBBER_PATIENCE = 0.5

# Purchase quantities (inclusive ranges)
REGULAR_QUANTITY = (1, 2)
VIP_QUANTITY = (2, 4)

REGULAR_BROWSE_CHANCE = 0.25  # Regulars who only look around
VIP_DISCOUNT = 0.10

# Robbers
ROBBER_MAX_HAUL = 10  # Units taken from one inventory slot
ROBBER_CASH_RATIO = 0.10  # Fraction of funds taken when shelves are empty
ROBBER_CASH_CAP = 50.0

# Customer factory used by the manager: "random" or one customer type
RANDOM_CUSTOMER_FACTORY = "random"
CUSTOMER_FACTORY = RANDOM_CUSTOMER_FACTORY
