"""Domain layer: records and pure calculators."""
