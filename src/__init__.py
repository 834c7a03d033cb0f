"""prebuildkit — podspec → XcodeGen translation and framework prebuilds."""

__version__ = "0.1.0"
