"""Value objects shared across the analysis core."""
