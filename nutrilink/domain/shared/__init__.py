"""Shared kernel: errors and value objects used across bounded contexts."""
