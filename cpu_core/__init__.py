"""CPU search workers."""
