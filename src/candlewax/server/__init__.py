"""ASGI server layer: request assembly, error boundary, response sending."""
