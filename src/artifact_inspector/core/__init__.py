"""Core data models and configuration."""
