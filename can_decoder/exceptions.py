"""
Custom exception classes for the CAN CBOR decoder.

This module provides specific exception types for different error scenarios.
None of them are fatal to a run: the capture pipeline catches them at the
source boundary and reports them as diagnostics.
"""

from typing import Any


class CanDecoderException(Exception):
    """Base exception for all decoder errors.

    All custom exceptions should inherit from this class to enable
    catching all application-specific errors while preserving exception
    hierarchy.
    """
    pass


class CaptureReadError(CanDecoderException):
    """Exception raised when a capture file cannot be read.

    Attributes:
        path: Path of the capture that failed
        original_error: The underlying exception that caused this error
    """

    def __init__(self, message: str, path: str = None, original_error: Exception = None):
        """Initialize CaptureReadError.

        Args:
            message: Human-readable error message
            path: Capture path (optional)
            original_error: Underlying exception (optional)
        """
        super().__init__(message)
        self.path = path
        self.original_error = original_error


class FrameClassificationError(CanDecoderException):
    """Exception raised when a frame has no header byte to classify.

    Attributes:
        can_id: CAN identifier text of the frame
    """

    def __init__(self, message: str, can_id: str = None):
        super().__init__(message)
        self.can_id = can_id


class PayloadDecodeError(CanDecoderException):
    """Exception raised when the payload codec cannot decode a buffer.

    Attributes:
        data: Buffer handed to the codec
        original_error: The underlying codec exception
    """

    def __init__(self, message: str, data: bytes = None, original_error: Exception = None):
        """Initialize PayloadDecodeError.

        Args:
            message: Human-readable error message
            data: Buffer that failed to decode (optional)
            original_error: Underlying exception (optional)
        """
        super().__init__(message)
        self.data = data
        self.original_error = original_error


class PayloadIncompleteError(PayloadDecodeError):
    """The buffer ends before the encoded value does; more frames are needed."""
    pass


class PayloadMalformedError(PayloadDecodeError):
    """The buffer is structurally invalid; more bytes cannot fix it."""
    pass


class ConfigurationError(CanDecoderException):
    """Exception raised for invalid configuration values.

    Attributes:
        setting_name: Name of the setting that is invalid
        setting_value: The invalid value
        expected: Description of expected value
    """

    def __init__(self, message: str, setting_name: str = None, setting_value: Any = None,
                 expected: str = None):
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error message
            setting_name: Name of invalid setting (optional)
            setting_value: Invalid value (optional)
            expected: Expected value description (optional)
        """
        super().__init__(message)
        self.setting_name = setting_name
        self.setting_value = setting_value
        self.expected = expected
