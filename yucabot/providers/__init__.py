"""Concrete adapters for the interfaces in :mod:`yucabot.interfaces`."""
