[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gcmvault"
version = "1.0.0"
description = "Encrypt, decrypt and verify files with AES-256-GCM and PBKDF2-derived keys"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = [
    "aes",
    "aes-256",
    "gcm",
    "pbkdf2",
    "encryption",
    "authenticated-encryption",
    "file-encryption",
]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gcmvault = "gcmvault.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gcmvault"]

[tool.hatch.build.targets.sdist]
include = [
    "gcmvault",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
