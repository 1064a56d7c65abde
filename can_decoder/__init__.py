"""
CAN CBOR decoder.

Classifies frames from exported CAN captures, reassembles multi-frame CBOR
messages and compares unaccounted frame patterns across captures.
"""

__version__ = '0.3.0'
