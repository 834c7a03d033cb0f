"""
Domain models — Pydantic types for prebuildkit.

All models are re-exported here for convenient access:

    from src.core.models import Podspec, ProjectSpec, Package, Parcel
"""

from src.core.models.config import (
    BuildFlavor,
    HeadersConfig,
    PrebuildConfig,
    PrebuildSettings,
    XcodeGenConfig,
)
from src.core.models.package import Package, Parcel
from src.core.models.podspec import Podspec, PodspecError, arrayize
from src.core.models.project_spec import (
    Dependency,
    InfoPlist,
    Options,
    ProjectReference,
    ProjectSpec,
    Settings,
    Source,
    Target,
)
from src.core.models.state import TaskBackup

__all__ = [
    # config.py
    "BuildFlavor",
    "HeadersConfig",
    "PrebuildConfig",
    "PrebuildSettings",
    "XcodeGenConfig",
    # package.py
    "Package",
    "Parcel",
    # podspec.py
    "Podspec",
    "PodspecError",
    "arrayize",
    # project_spec.py
    "Dependency",
    "InfoPlist",
    "Options",
    "ProjectReference",
    "ProjectSpec",
    "Settings",
    "Source",
    "Target",
    # state.py
    "TaskBackup",
]
