"""Custom exceptions for configuration validation."""


class ConfigurationError(Exception):
    """Raised when configuration validation finds critical issues.

    This exception is raised by :meth:`AnalyticsConfig.validate_settings` when the
    configuration would make charts or estimates meaningless.

    Attributes:
        issues: List of specific configuration problems found.

    Examples:
        Catching and inspecting issues::

            try:
                config.validate_settings()
            except ConfigurationError as e:
                for issue in e.issues:
                    print(f"  - {issue}")
    """

    def __init__(self, issues: list[str]) -> None:
        self.issues = issues
        bullet_list = "\n".join(f"  - {issue}" for issue in issues)
        super().__init__(
            f"Configuration has {len(issues)} critical "
            f"{'issue' if len(issues) == 1 else 'issues'}:\n{bullet_list}"
        )
