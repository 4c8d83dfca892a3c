"""
Fraction Racer
==============

Arcade game in which a ship collects falling fraction gems to reach an
exact per-level target, then proves the sum in a short arithmetic check.

- racer_core: simulation engine, state machine and pygame collaborators
- game_config.yaml: every tunable and the fixed level table
"""
