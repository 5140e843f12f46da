"""Configuration — crust.toml discovery, settings, and logging setup."""
