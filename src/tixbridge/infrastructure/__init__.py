"""Infrastructure layer: configuration, logging, resilience, security."""
