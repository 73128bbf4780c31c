"""Configuration: environment settings, pre-commit YAML loading and logging setup."""
