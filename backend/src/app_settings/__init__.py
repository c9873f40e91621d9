"""Global reference configuration."""
