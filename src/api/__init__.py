"""HTTP API layer for the RIM Agent Host."""
