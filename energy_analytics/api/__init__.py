"""HTTP service exposing the analytics engine."""
