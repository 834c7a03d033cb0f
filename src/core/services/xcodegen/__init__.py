"""
XcodeGen integration — podspec → project spec → .xcodeproj.

    xcconfig    merge layered build settings ($(inherited)-aware)
    translator  build a ProjectSpec from a Podspec
    generator   write the spec, run xcodegen, clean up
"""

from src.core.services.xcodegen.generator import generate_xcode_project, spec_file
from src.core.services.xcodegen.translator import (
    INFO_PLIST_FILENAME,
    PLATFORMS_MAPPING,
    create_spec_from_podspec,
    pod_name_to_bundle_id,
)
from src.core.services.xcodegen.xcconfig import (
    INHERITED,
    merge_xcode_config_value,
    merge_xcode_configs,
)

__all__ = [
    "INFO_PLIST_FILENAME",
    "INHERITED",
    "PLATFORMS_MAPPING",
    "create_spec_from_podspec",
    "generate_xcode_project",
    "merge_xcode_config_value",
    "merge_xcode_configs",
    "pod_name_to_bundle_id",
    "spec_file",
]
