from .step_00_preflight import PreflightStep
from .step_10_install_dependencies import InstallDependenciesStep
from .step_20_enable_channel import EnableChannelStep
from .step_20_install_pyenv import InstallPyenvStep
from .step_25_configure_pyenv_profile import ConfigurePyenvProfileStep
from .step_30_resolve_conflicts import ResolveConflictsStep
from .step_40_resolve_pyenv_version import ResolvePyenvVersionStep
from .step_40_resolve_version import ResolveVersionStep
from .step_50_install_runtime import InstallRuntimeStep
from .step_50_pyenv_install import PyenvInstallStep
from .step_55_docker_group import DockerGroupStep
from .step_60_bootstrap_pip import BootstrapPipStep
from .step_70_install_shims import InstallShimsStep
from .step_80_update_profile import UpdateProfileStep
from .step_90_verify import VerifyStep

__all__ = [
    "PreflightStep",
    "InstallDependenciesStep",
    "EnableChannelStep",
    "InstallPyenvStep",
    "ConfigurePyenvProfileStep",
    "ResolveConflictsStep",
    "ResolvePyenvVersionStep",
    "ResolveVersionStep",
    "InstallRuntimeStep",
    "PyenvInstallStep",
    "DockerGroupStep",
    "BootstrapPipStep",
    "InstallShimsStep",
    "UpdateProfileStep",
    "VerifyStep",
]
