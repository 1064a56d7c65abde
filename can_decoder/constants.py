"""
Constants for the CAN CBOR decoder.

This module centralizes the protocol constants and default settings used
throughout the decoder. Constants are organized by category:
- Header byte framing
- Heartbeat detection
- Capture units
- Display
- Known CAN IDs used for annotations
"""

# Header byte framing (high nibble of payload[0])
HEADER_NIBBLE_MASK = 0xF0
HEADER_START = 0xA0  # Ax = start of a new CBOR message
HEADER_CONTINUATION = 0x10  # 1x = continuation of the current message

# Heartbeat / keep-alive frames: ID text prefix plus an all-zero payload
HEARTBEAT_ID_PREFIX = '01111'

# SavvyCAN writes timestamps in microseconds
SAVVYCAN_TIMESTAMP_SCALE = 1e-6

# Byte strings of this length are flagged as a possible nonce/IV
NONCE_LENGTH = 9

# Display
SEPARATOR_WIDE = '=' * 51
SEPARATOR_GROUP = '-' * 60
SEPARATOR_COMPARE = '-' * 70
TIMESTAMP_DECIMALS = 6

# CAN IDs with hand-written annotations
CAN_ID_TELEMETRY = '14609460'
CAN_ID_STATUS = '18209820'

# Defaults
LOG_LEVEL_DEFAULT = 'WARNING'
MAX_WORKERS_DEFAULT = 4
