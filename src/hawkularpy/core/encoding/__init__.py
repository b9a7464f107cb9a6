"""Wire encoding for metrics service bodies."""
