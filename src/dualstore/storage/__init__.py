"""Storage backends for the object store and the content-addressed store."""
