"""Shared types, constants, errors, and logging for the simulator."""
