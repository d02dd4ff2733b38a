"""Domain layer: entities shared by every component."""
