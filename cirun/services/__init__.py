"""External collaborators: npm, node setup and artifact storage."""

from cirun.services.artifacts import ArtifactStore, LocalArtifactStore, MockArtifactStore
from cirun.services.node import MockNodeInstaller, NodeInstaller, NodeOptions, SystemNodeInstaller
from cirun.services.npm import MockNpmClient, NpmClient, NpmProtocol

__all__ = [
    "ArtifactStore",
    "LocalArtifactStore",
    "MockArtifactStore",
    "NodeInstaller",
    "NodeOptions",
    "SystemNodeInstaller",
    "MockNodeInstaller",
    "NpmClient",
    "NpmProtocol",
    "MockNpmClient",
]
