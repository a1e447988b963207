"""Core services for dropctl: paths, configuration, resolution and dispatch."""
