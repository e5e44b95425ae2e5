"""Domain layer for docblocks."""
