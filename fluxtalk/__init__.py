"""fluxtalk - Flux CD event notifications for DingTalk robots."""
__version__ = "0.1.0"
