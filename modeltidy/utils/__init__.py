"""Shared utilities: errors, structured logging and configuration."""
