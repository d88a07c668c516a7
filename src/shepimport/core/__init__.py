"""Core layer: errors, configuration, run context and IR types."""
