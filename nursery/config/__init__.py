"""Configuration package for the nursery simulation.

Constants are grouped by concern (plants, economy, customers) and gathered
into overridable dataclasses by ``simulation_config``.
"""
