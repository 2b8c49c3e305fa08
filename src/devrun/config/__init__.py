"""Configuration: settings models and YAML config loading."""
