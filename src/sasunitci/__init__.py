from .installation import InstallationStore, resolve_installation
from .model import BuildStep, Installation, NodeContext
from .runner import run_build_step

__all__ = ["InstallationStore", "resolve_installation", "BuildStep", "Installation", "NodeContext", "run_build_step"]
