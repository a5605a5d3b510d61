"""Raw record aggregation and series utilities."""
