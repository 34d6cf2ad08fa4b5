"""Job board backend: entity client, job filtering and portal state."""
