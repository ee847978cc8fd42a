"""Helper modules for Civic Badges integration (flow schemas, validation, signals)."""
