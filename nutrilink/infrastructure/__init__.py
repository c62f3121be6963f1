"""Infrastructure layer: cache and upstream API clients."""
