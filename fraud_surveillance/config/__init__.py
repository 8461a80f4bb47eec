"""Settings, scoring weights and loguru configuration."""
