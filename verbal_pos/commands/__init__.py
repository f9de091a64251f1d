"""Text-command parsing and validation.

The command layer converts free-form shop text (typed, or transcribed from speech) into a strict,
validated command object, which the inventory executor then runs against the repository.
"""
