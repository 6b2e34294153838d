"""Domain layer: trace events, options and errors. No dependencies on other layers."""
