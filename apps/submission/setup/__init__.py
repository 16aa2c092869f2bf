"""Service setup: configuration, dependency wiring, logging, telemetry."""
