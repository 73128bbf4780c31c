"""Building blocks of the change-impact analysis."""
