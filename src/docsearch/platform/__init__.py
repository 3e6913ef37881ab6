"""Cross-cutting concerns (configuration, logging)."""
