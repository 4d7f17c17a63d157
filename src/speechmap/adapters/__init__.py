"""Adapters connecting the domain to persistence, HTTP feeds, and geocoding."""
