"""Configuration — settings, TOML discovery, logging, and lookup tables."""
