"""Core compilation primitives: options, session state and preview block helpers."""
