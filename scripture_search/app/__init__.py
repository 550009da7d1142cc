"""Application layer: settings, storage and search services."""
