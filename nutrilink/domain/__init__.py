"""Domain layer: models, mappers and pure business rules."""
