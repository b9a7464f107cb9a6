"""Core domain: models, coercion, errors and wire encoding."""
