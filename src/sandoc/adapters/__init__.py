"""Adapters wrapping third-party engines used by the compiler."""
