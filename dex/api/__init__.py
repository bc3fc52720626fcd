"""HTTP service exposing the registry and pools."""
