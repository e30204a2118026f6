from .tones import ToneBank, synthesize_tone

__all__ = ["ToneBank", "synthesize_tone"]
