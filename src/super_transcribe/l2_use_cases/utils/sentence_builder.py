"""Sentence grouping and rendering for aligned token streams."""

from __future__ import annotations

from collections.abc import Iterable

from super_transcribe.l1_entities.transcript import AlignedSentence, AlignedToken, format_time_range


def tokens_to_sentences(tokens: Iterable[AlignedToken]) -> list[AlignedSentence]:
    """Group tokens into sentences, closing one on '.', '!' or '?' and at end of stream."""
    sentences: list[AlignedSentence] = []
    current: list[AlignedToken] = []
    for tok in tokens:
        current.append(tok)
        if tok.closes_sentence:
            sentences.append(AlignedSentence(tokens=current))
            current = []
    if current:
        sentences.append(AlignedSentence(tokens=current))
    return sentences


def render_sentences(sentences: list[AlignedSentence], show_timestamps: bool) -> str:
    """Timestamped mode: one ``[start->end] text`` line per sentence. Otherwise plain text."""
    if show_timestamps:
        return '\n'.join(f'{format_time_range(s.start, s.end)} {s.text.strip()}' for s in sentences)
    return ''.join(s.text for s in sentences)
