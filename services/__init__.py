"""Case file storage, record store, policies and search."""
