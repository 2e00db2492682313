"""Repository boundary between services and the persisted store."""
