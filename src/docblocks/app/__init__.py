"""Application services for docblocks."""
