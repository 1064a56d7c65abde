"""Capture-file ingestion: turns exported CAN logs into RawFrame records."""
