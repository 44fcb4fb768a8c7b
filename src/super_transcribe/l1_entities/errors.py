"""Domain error types."""


class TranscriptionError(Exception):
    """Base class for failures surfaced by a transcription request."""


class ContextInitializationFailed(TranscriptionError):
    """Raised when no usable model session is loaded."""


class AudioConversionFailed(TranscriptionError):
    """Raised when the input file cannot be decoded to 16 kHz mono PCM."""


class ProcessingFailed(TranscriptionError):
    """Raised when an encode/decode step of the inference backend fails."""


class TranscriptionCancelled(ProcessingFailed):
    """Raised when the request was cancelled before producing a result."""


class TranscriptionBusyError(TranscriptionError):
    """Raised when a transcription is requested while another one is active."""


class ModelResolutionError(Exception):
    """Raised when a speech model cannot be resolved to a local path."""
