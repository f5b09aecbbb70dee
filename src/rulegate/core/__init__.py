"""Ambient infrastructure: configuration, coercion, logging, startup checks."""
