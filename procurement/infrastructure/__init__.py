"""Infrastructure layer: persistence, security and side-effect services."""
