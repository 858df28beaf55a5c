"""
OrcaSlicer metadata and directory layout for converted user profiles.

Every converted profile carries these fields so OrcaSlicer lists it as a user
preset. You can modify them as needed for your OrcaSlicer version.
"""
import os
import sys
from pathlib import Path
from typing import Any, Dict

from orca_converters.errors import OutputDirectoryError

ORCA_SLICER_VERSION = '1.6.0.0'

# Fields added to every converted profile
PROFILE_METADATA = {
    "from": "User",
    "is_custom_defined": "1",
    "version": ORCA_SLICER_VERSION,
}

# Where each profile type lives below the OrcaSlicer data directory
OUTPUT_SUBDIRS = {
    'filament': ('user', 'default', 'filament'),
    'print': ('user', 'default', 'process'),
    'printer': ('user', 'default', 'machine'),
}

# Where the slicers keep their data, relative to the home directory
SYSTEM_DATA_DIRS = {
    'linux': ('.config',),
    'win32': ('AppData', 'Roaming'),
    'darwin': ('Library', 'Application Support'),
}

ORCA_DATA_DIR_NAME = 'OrcaSlicer'
SOURCE_SLICERS = ('PrusaSlicer', 'SuperSlicer')


def get_data_directory(platform: str = None) -> Path:
    """Directory holding the per-application data folders (~/.config on Linux)."""
    platform = platform or sys.platform
    if platform.startswith('linux'):
        platform = 'linux'
    parts = SYSTEM_DATA_DIRS.get(platform, SYSTEM_DATA_DIRS['linux'])
    return Path.home().joinpath(*parts)


def get_default_output_directory(platform: str = None) -> Path:
    """The root OrcaSlicer settings directory."""
    return get_data_directory(platform) / ORCA_DATA_DIR_NAME


def get_output_directory(output_root: Path, profile_type: str, force_output: bool = False) -> Path:
    """
    Directory a converted profile of the given type is written to.

    Args:
        output_root: Root OrcaSlicer settings directory (or any directory with force_output)
        profile_type: One of 'filament', 'print', 'printer'
        force_output: Write directly into output_root instead of the user preset folder
    """
    if force_output:
        return Path(output_root)
    return Path(output_root).joinpath(*OUTPUT_SUBDIRS[profile_type])


def check_output_directory(directory: Path, force_output: bool = False):
    """
    Make sure the output directory exists and is writable.

    Raises:
        OutputDirectoryError: if it doesn't exist or isn't writable
    """
    if not directory.is_dir():
        message = f"Output directory {directory} cannot be found."
        if not force_output:
            message += (" Are you sure that the --outdir is the correct ROOT directory "
                        "of your OrcaSlicer installation? (Run with -h for more info.)")
        raise OutputDirectoryError(message)

    if not os.access(directory, os.W_OK):
        raise OutputDirectoryError(f"Output directory {directory} is not writable.")


def apply_metadata(profile: Dict[str, Any], profile_type: str, name: str) -> Dict[str, Any]:
    """
    Add the fields OrcaSlicer requires on every user profile.

    Args:
        profile: The converted profile dictionary
        profile_type: One of 'filament', 'print', 'printer'
        name: Profile name (the source file name without extension)

    Returns:
        Profile with metadata applied
    """
    profile[f"{profile_type}_settings_id"] = name
    profile["name"] = name
    profile.update(PROFILE_METADATA)
    return profile
