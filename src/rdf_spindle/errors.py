"""
Exception hierarchy for rdf-spindle.

Per-statement problems in a rulebase or in source data are logged and
skipped; only the exceptions below ever escape to the caller.
"""


class SpindleError(Exception):
    """Base class for all rdf-spindle errors."""
    pass


class RulebaseError(SpindleError):
    """Raised when a rulebase cannot be compiled; the whole load is aborted."""
    pass


class RulebaseFrozenError(RulebaseError):
    """Raised when a finalized rulebase is modified."""
    pass


class FusionError(SpindleError):
    """Raised when a proxy build fails; the whole build is aborted."""
    pass


class InvalidLanguageTag(SpindleError, ValueError):
    """Raised for a language tag that cannot be bucketed."""
    pass


class ConfigError(SpindleError):
    """Raised for unreadable or invalid configuration."""
    pass
