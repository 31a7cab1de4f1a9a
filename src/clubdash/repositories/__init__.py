"""Repository layer - data access protocols and implementations."""
