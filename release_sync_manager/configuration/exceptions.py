"""Contains exceptions raised when reconciling application configuration."""


class GitHubAuthenticationConfigurationUndefinedError(Exception):
    """Raised when neither a complete PAT nor a complete GitHub App configuration is given, or both are."""

    pass


class RequiredConfigurationElementError(Exception):
    """Raised when a setting a command cannot run without is neither passed on the CLI nor set in the environment."""

    def __init__(self, name: str, cli_name: str, env_name: str) -> None:
        """Initializes the exception with the name of the missing element and where it can be provided."""
        option = "--" + cli_name.replace("_", "-")
        super().__init__(f"Missing required configuration element: {name}. Pass {option} or set the {env_name} environment variable.")
        self.name = name
        self.cli_name = cli_name
        self.env_name = env_name
