"""
Custom exception classes for the Configurator.

This module defines structured exception types for settings loading and
callback protocol misuse. Artifact-level failures are never raised; they
are recorded in the run statistics.
"""


class ConfiguratorError(Exception):
    """Base exception for all Configurator errors."""
    pass


class ManifestLoadError(ConfiguratorError):
    """Error loading a settings or metrics manifest."""

    def __init__(self, file_name: str, message: str):
        self.file_name = file_name
        self.message = message
        super().__init__(f"Error loading {file_name}: {message}")


class CallbackStateError(ConfiguratorError):
    """A response callback was asked to do something contradictory."""

    def __init__(self, artifact_path: str, message: str):
        self.artifact_path = artifact_path
        self.message = message
        super().__init__(f"Callback for {artifact_path}: {message}")
