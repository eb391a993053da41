"""Shared exception base for clusternotify."""

from __future__ import annotations


class ClusterNotifyError(Exception):
    """Base exception for all clusternotify errors.

    This provides a single catch point for decode, parse, delivery and
    configuration failures raised by the pipeline.
    """


class ConfigError(ClusterNotifyError):
    """Raised when service configuration read at start-up is invalid."""

    @classmethod
    def invalid_value(cls, env_var: str, value: str, constraint: str) -> ConfigError:
        """Create error for an environment variable with an invalid value.

        Parameters
        ----------
        env_var
            Name of the offending environment variable.
        value
            The raw value that failed validation.
        constraint
            A description of the valid value requirements.

        Returns
        -------
        ConfigError
            Error with formatted message describing the invalid value.

        """
        return cls(f"Invalid {env_var} {value!r}. {constraint}")

    @classmethod
    def invalid_webhook_url(cls, value: str) -> ConfigError:
        """Create error for a webhook URL that is not an absolute http(s) URL."""
        return cls.invalid_value(
            "SLACK_WEBHOOK", value, "Must be an absolute http or https URL"
        )

    @classmethod
    def invalid_alias(cls, entry: str) -> ConfigError:
        """Create error for a malformed ``alias=KnownType`` entry."""
        return cls.invalid_value(
            "EVENT_TYPE_ALIASES", entry, "Entries must look like 'alias=KnownType'"
        )
