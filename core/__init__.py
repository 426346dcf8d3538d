"""core/ -- Configuration kernel. Imports nothing from the other packages."""
