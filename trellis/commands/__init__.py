"""Click command groups for the Trellis CLI."""
