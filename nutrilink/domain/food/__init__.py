"""Food bounded context: canonical items, per-source models and mappers."""
