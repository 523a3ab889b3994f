"""Domain layer - newsletter tables, their rules and the emulated transaction model."""
