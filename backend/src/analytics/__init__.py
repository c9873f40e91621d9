"""Read-side reporting over the record collection."""
