"""
Exceptions raised outside the balance/settlement core
"""


class VoiceSplitError(Exception):
    """Base class for VoiceSplit errors"""


class ExtractionError(VoiceSplitError):
    """The transcription provider call failed"""


class MissingApiKeyError(ExtractionError):
    """No Gemini API key configured"""


class InvalidEntryError(VoiceSplitError):
    """Entry rejected before it reaches the bill book"""


class EntryNotFoundError(VoiceSplitError):
    """No entry with the given id"""
