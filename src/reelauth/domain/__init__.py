"""Domain layer: exceptions and business services."""
