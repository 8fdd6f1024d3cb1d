"""Application layer for the RIM Agent Host."""
