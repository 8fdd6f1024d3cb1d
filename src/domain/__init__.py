"""Domain layer for the RIM Agent Host."""
