"""What-if scenario projections."""
