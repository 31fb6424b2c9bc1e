"""Configuration schemas and loading."""
