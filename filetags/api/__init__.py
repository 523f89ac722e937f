"""HTTP adapter over the tagging engine."""
