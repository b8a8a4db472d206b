"""Story Forge - narrative entity modeling and derivation engine.

Character tiers and upgrades, relationship styling and circular character-web
layout, and location day-rate estimation for pre-production tooling.
"""

__version__ = "0.1.0"
