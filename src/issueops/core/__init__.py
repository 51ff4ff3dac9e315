"""Core types, errors, configuration and helpers shared by every layer."""
