"""EcoStellar contract gateway."""
