"""super-transcribe: file speech-to-text over whisper.cpp and Parakeet backends."""

__version__ = '0.1.0'
