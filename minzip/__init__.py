"""Zip directory reading, with byte, file-mapping, hashing and bitmap font helpers."""

__version__ = "0.1.0"
__all__ = ["archive", "bits", "font", "hashtable", "sysutil"]