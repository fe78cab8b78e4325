"""Command handlers for the random-album CLI."""
