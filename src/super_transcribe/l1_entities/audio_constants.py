"""Audio format constants shared by ingestion and the inference adapters."""

SAMPLE_RATE = 16000  # Hz, mono float32 PCM
