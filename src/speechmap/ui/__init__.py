"""Command-line interface for speechmap."""
