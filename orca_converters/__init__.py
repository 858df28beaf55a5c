"""Converters module for SuperSlicer/PrusaSlicer to OrcaSlicer conversion."""
from .base import (
    BaseConverter,
    SimpleKeyConverter,
    SplitConverter,
    TrackedKeyConverter,
    CustomConverter,
    ConverterRegistry,
    ConversionContext,
    ConversionResult
)
from .errors import (
    ConversionError,
    OutputDirectoryError,
    QuitRequested
)
from .mapping_registry import (
    create_print_registry,
    create_printer_registry,
    create_filament_registry,
    create_physical_printer_registry
)
from .print_speeds import calculate_print_params
from .profile_converters import (
    PrinterProfileConverter,
    PrintProfileConverter,
    FilamentProfileConverter,
    detect_profile_type,
    merge_existing_profile,
    save_json_profile
)

__all__ = [
    'BaseConverter',
    'SimpleKeyConverter',
    'SplitConverter',
    'TrackedKeyConverter',
    'CustomConverter',
    'ConverterRegistry',
    'ConversionContext',
    'ConversionResult',
    'ConversionError',
    'OutputDirectoryError',
    'QuitRequested',
    'create_print_registry',
    'create_printer_registry',
    'create_filament_registry',
    'create_physical_printer_registry',
    'calculate_print_params',
    'PrinterProfileConverter',
    'PrintProfileConverter',
    'FilamentProfileConverter',
    'detect_profile_type',
    'merge_existing_profile',
    'save_json_profile',
]
