"""EmUni test suite."""
