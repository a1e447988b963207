"""Bundled data files for dropctl."""
