"""
Shared regex patterns for capture line parsing.

Centralizes the patterns used by the text readers and format detection so the
candump and SavvyCAN readers agree on what a frame line looks like.
"""
import re

# candump: "(1699999999.123456) can0 18209820#A2010203" or bare "123#0011"
REGEX_CANDUMP_TIMESTAMP = re.compile(r'\(\s*([+-]?\d+(?:\.\d*)?)\s*\)')
REGEX_HEX_WHITESPACE = re.compile(r'\s+')

# SavvyCAN CSV header, e.g. "Time Stamp,ID,Extended,Dir,Bus,LEN,D1,...,D8"
REGEX_SAVVYCAN_HEADER = re.compile(r'Time Stamp|ID,Extended')
