"""Transport layer: the TCP session with the printer."""
