"""
Geocache Package
================

A map-based merge game. Caches holding power-of-two values are seeded
procedurally across an unbounded cell lattice; the player walks within
range to pick a cache up or merge it with an equal carried value until a
score goal is reached.

The simulation lives in geocache.cache_core. Tunable parameters are in
game_config.yaml and are read once at startup.
"""
