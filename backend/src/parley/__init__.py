"""Realtime relay and voice-room core for the Parley language exchange."""
