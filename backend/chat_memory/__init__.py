"""IslamicAI chat memory - local chat history store and conversation core."""

__version__ = "1.0.0"
