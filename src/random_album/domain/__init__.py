"""Domain layer: selection, playback and library."""
