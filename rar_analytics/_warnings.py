"""Custom warning classes for the rar_analytics package.

These warning classes allow users to programmatically filter, suppress,
or capture warnings using Python's standard ``warnings`` module.

Example:
    Suppress configuration warnings when loading a site config::

        import warnings
        from rar_analytics._warnings import ConfigurationWarning

        warnings.filterwarnings("ignore", category=ConfigurationWarning)
"""


class RarAnalyticsWarning(UserWarning):
    """Base class for all rar_analytics warnings."""


class ConfigurationWarning(RarAnalyticsWarning):
    """Unusual but legal configuration parameters.

    Issued by :meth:`AnalyticsConfig.validate_settings` when a setting is accepted
    but likely to give misleading charts or estimates (e.g., very coarse
    curve sampling or the Stirling PERT normaliser).
    """
