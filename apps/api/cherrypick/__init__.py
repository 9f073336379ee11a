"""Find commits already cherry-picked between two repositories and pick the rest."""

__version__ = "0.1.0"
