"""SM-2 spaced repetition scheduling engine."""
