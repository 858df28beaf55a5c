"""
Profile converters for printer, print, and filament profiles.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from orca_converters.base import ConversionContext, ConverterRegistry
from orca_converters.mapping_registry import (
    create_filament_registry,
    create_physical_printer_registry,
    create_print_registry,
    create_printer_registry,
    create_registries,
)
from orca_converters.orca_defaults import apply_metadata
from orca_converters.print_speeds import calculate_print_params
from orca_converters.values import format_number, to_number

logger = logging.getLogger(__name__)

# Fewer recognized keys than this and the file is not a profile we know
MIN_MATCHING_KEYS = 10

# Ties between profile types go to the first one listed
PROFILE_TYPES = ('print', 'filament', 'printer')


def detect_profile_type(settings: Dict[str, Any],
                        registries: Dict[str, ConverterRegistry] = None) -> Optional[str]:
    """
    Guess the profile type from the keys of a source INI file.

    Args:
        settings: Source key/value pairs
        registries: Registries keyed by profile type (created if not given)

    Returns:
        'print', 'filament' or 'printer', or None if no type has at least
        MIN_MATCHING_KEYS known keys
    """
    registries = registries or create_registries()
    counts = {profile_type: registries[profile_type].count_known_keys(settings)
              for profile_type in PROFILE_TYPES}
    logger.debug(f"Profile type key matches: {counts}")

    best_type = None
    for profile_type in PROFILE_TYPES:
        if counts[profile_type] < MIN_MATCHING_KEYS:
            continue
        if best_type is None or counts[profile_type] > counts[best_type]:
            best_type = profile_type
    return best_type


class FilamentProfileConverter:
    """Converts filament profiles to OrcaSlicer filament profiles."""

    profile_type = 'filament'

    def __init__(self):
        self.registry = create_filament_registry()
        self.needs_conversion = []

    def convert_filament_profile(self, name: str, context: ConversionContext) -> Dict[str, Any]:
        """Convert a filament profile's settings to an OrcaSlicer filament profile."""
        filament, needs_conv = self.registry.convert_dict(context.source, context)
        self.needs_conversion.extend(needs_conv)

        apply_metadata(filament, self.profile_type, name)

        # OrcaSlicer wants a printable temperature range
        filament["nozzle_temperature_range_low"] = "0"
        filament["nozzle_temperature_range_high"] = format_number(context.max_temperature)
        filament["slow_down_for_layer_cooling"] = (
            "1" if to_number(context.source.get('slowdown_below_layer_time')) > 0 else "0"
        )

        return filament

    convert = convert_filament_profile


class PrintProfileConverter:
    """Converts print profiles to OrcaSlicer process profiles."""

    profile_type = 'print'

    def __init__(self):
        self.registry = create_print_registry()
        self.needs_conversion = []

    def convert_print_profile(self, name: str, context: ConversionContext) -> Dict[str, Any]:
        """Convert a print profile's settings to an OrcaSlicer process profile."""
        process, needs_conv = self.registry.convert_dict(context.source, context)
        self.needs_conversion.extend(needs_conv)

        apply_metadata(process, self.profile_type, name)

        # Speeds and the settings derived from tracked flags need the whole profile
        process.update(calculate_print_params(context.source, context.tracked, context.slicer_flavor))

        return process

    convert = convert_print_profile


class PrinterProfileConverter:
    """Converts printer profiles to OrcaSlicer machine profiles."""

    profile_type = 'printer'

    def __init__(self):
        self.registry = create_printer_registry()
        self.physical_printer_registry = create_physical_printer_registry()
        self.needs_conversion = []

    def convert_physical_printer(self, settings: Dict[str, str],
                                 context: ConversionContext) -> Dict[str, Any]:
        """Convert the network settings of a physical printer profile."""
        printer_context = ConversionContext(
            source=settings,
            slicer_flavor=context.slicer_flavor,
            nozzle_size=context.nozzle_size,
            profile_name=context.profile_name,
        )
        known = {key: value for key, value in settings.items()
                 if self.physical_printer_registry.handles(key)}
        converted, _ = self.physical_printer_registry.convert_dict(known, printer_context)
        return {key: value for key, value in converted.items() if value != ""}

    def convert_printer_profile(self, name: str, context: ConversionContext,
                                physical_printer: Dict[str, str] = None,
                                inherits: Optional[str] = None) -> Dict[str, Any]:
        """
        Convert a printer profile's settings to an OrcaSlicer machine profile.

        Args:
            name: Profile name
            context: Conversion context holding the source settings
            physical_printer: Settings of the physical printer to merge in, if any
            inherits: OrcaSlicer system printer to inherit from, if chosen
        """
        machine, needs_conv = self.registry.convert_dict(context.source, context)
        self.needs_conversion.extend(needs_conv)

        apply_metadata(machine, self.profile_type, name)

        if physical_printer:
            machine.update(self.convert_physical_printer(physical_printer, context))

        if inherits is not None:
            machine["inherits"] = inherits

        return machine

    convert = convert_printer_profile


PROFILE_CONVERTERS = {
    'filament': FilamentProfileConverter,
    'print': PrintProfileConverter,
    'printer': PrinterProfileConverter,
}


def nozzle_size_from_settings(settings: Dict[str, str]) -> Optional[str]:
    """First extruder's nozzle diameter, if the profile has one."""
    value = settings.get('nozzle_diameter')
    if not value:
        return None
    delimiter = ',' if ',' in value else ';'
    return value.split(delimiter)[0].strip()


def nozzle_size_from_layer_height(settings: Dict[str, str]) -> Optional[str]:
    """Twice the layer height, as a stand-in when the nozzle size is unknown."""
    layer_height = to_number(settings.get('layer_height'))
    if layer_height <= 0:
        return None
    return format_number(2 * layer_height)


def load_json_profile(filepath: Path) -> Dict[str, Any]:
    with open(filepath, 'r', encoding='utf-8') as f:
        return json.load(f)


def merge_existing_profile(profile: Dict[str, Any], filepath: Path) -> Dict[str, Any]:
    """
    Merge a converted profile into an existing JSON profile.

    Settings already present in the existing file are left unmodified; only
    new keys are added.

    Raises:
        ValueError: if the existing file does not hold a JSON object
    """
    existing = load_json_profile(filepath)
    if not isinstance(existing, dict):
        raise ValueError("existing file does not hold a JSON object")

    merged = dict(profile)
    merged.update(existing)
    return merged


def save_json_profile(profile: Dict[str, Any], output_dir: str, filename: str) -> str:
    """Save a profile as a JSON file with sorted keys."""
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, filename)

    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(profile, f, indent=4, ensure_ascii=False, sort_keys=True)
        f.write('\n')

    return filepath


def list_system_printers(output_root: Path) -> List[str]:
    """
    Names of the printers configured in an OrcaSlicer installation.

    Reads the machine_list of every vendor file in <output_root>/system,
    leaving out the abstract "common" machines.
    """
    system_dir = Path(output_root) / 'system'
    names = set()
    if not system_dir.is_dir():
        return []

    for vendor_file in system_dir.glob('*.json'):
        try:
            data = load_json_profile(vendor_file)
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping unreadable OrcaSlicer vendor file {vendor_file}: {e}")
            continue
        for machine in data.get('machine_list', []):
            name = machine.get('name', '')
            if name and 'common' not in name.lower():
                names.add(name)

    return sorted(names)
