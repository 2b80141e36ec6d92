"""Infrastructure layer - registry, chain, layers, dispatcher and logging."""
