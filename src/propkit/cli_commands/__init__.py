"""Click command modules registered onto the propkit CLI group."""
