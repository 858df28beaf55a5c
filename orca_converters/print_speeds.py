"""
Second pass over print profiles.

SuperSlicer and PrusaSlicer allow many speeds to be a percentage of another
speed, while OrcaSlicer requires absolute values. Speeds are resolved in the
fixed SPEED_SEQUENCE order so a percentage can always refer to a sibling that
has already been resolved. The same pass derives the settings OrcaSlicer
expresses as a single dropdown where the source uses several flags.
"""
import logging
from typing import Any, Dict, Optional

from orca_converters.base import NIL_VALUE
from orca_converters.lookup_tables import (
    OVERHANG_SPEED_KEYS,
    SPEED_PARAMS,
    SPEED_REFERENCES,
    SPEED_SEQUENCE,
    SPEED_VALUE_SOURCES,
)
from orca_converters.values import format_speed, is_truthy, percent_to_mm

logger = logging.getLogger(__name__)

SUPERSLICER = 'SuperSlicer'
PRUSASLICER = 'PrusaSlicer'

NO_IRONING = "no ironing"


def _rules_flavor(slicer_flavor: Optional[str]) -> str:
    # Anything that is not SuperSlicer follows PrusaSlicer's rules
    return SUPERSLICER if slicer_flavor == SUPERSLICER else PRUSASLICER


def resolve_speeds(source: Dict[str, str], slicer_flavor: str = None) -> Dict[str, str]:
    """
    Resolve every speed of SPEED_SEQUENCE present in the source to an absolute value.

    Returns:
        Dict of OrcaSlicer speed keys to values rounded to one decimal place
    """
    flavor = _rules_flavor(slicer_flavor)
    references = SPEED_REFERENCES[flavor]
    value_sources = SPEED_VALUE_SOURCES.get(flavor, {})
    resolved: Dict[str, str] = {}
    speeds: Dict[str, str] = {}

    for parameter in SPEED_SEQUENCE:
        if parameter not in source or source[parameter] == NIL_VALUE:
            continue

        value = source.get(value_sources.get(parameter, parameter))
        if value is None or value == NIL_VALUE:
            continue

        reference_key = references.get(parameter)
        if reference_key is not None:
            reference = resolved.get(reference_key, source.get(reference_key))
            value = percent_to_mm(reference, value)

        if value is None:
            logger.warning(f"Cannot resolve {parameter} = {source[parameter]}: "
                           f"{reference_key} is not an absolute speed")
            continue

        value = format_speed(value)
        resolved[parameter] = value
        speeds[SPEED_PARAMS[parameter]] = value

    return speeds


def expand_overhang_speeds(source: Dict[str, str]) -> Dict[str, str]:
    """Translate the dynamic overhang speed list into OrcaSlicer's four quarter speeds."""
    enabled = is_truthy(source.get('enable_dynamic_overhang_speeds'))
    params = {'enable_overhang_speed': '1' if enabled else '0'}
    if not enabled:
        return params

    speeds = [speed.strip() for speed in source.get('dynamic_overhang_speeds', '').split(',')]
    if len(speeds) != len(OVERHANG_SPEED_KEYS):
        logger.warning(f"Expected {len(OVERHANG_SPEED_KEYS)} dynamic overhang speeds, "
                       f"got '{source.get('dynamic_overhang_speeds', '')}'")
        return params

    for key, speed in zip(OVERHANG_SPEED_KEYS, speeds):
        params[key] = speed
    return params


def evaluate_print_order(external_perimeters_first: Any, infill_first: Any) -> str:
    """Combine the two feature-order flags into OrcaSlicer's wall/infill order."""
    if external_perimeters_first and infill_first:
        return "infill/outer wall/inner wall"
    if infill_first:
        return "infill/inner wall/outer wall"
    if external_perimeters_first:
        return "outer wall/inner wall/infill"
    return "inner wall/outer wall/infill"


def evaluate_ironing_type(ironing: Any, ironing_type: Optional[str]) -> str:
    if ironing:
        return ironing_type if ironing_type is not None else NO_IRONING
    return NO_IRONING


def calculate_print_params(source: Dict[str, str], tracked: Dict[str, Any],
                           slicer_flavor: str = None) -> Dict[str, str]:
    """
    Compute the print settings that depend on several source settings.

    Args:
        source: Source print profile settings
        tracked: Values recorded during the main pass (feature-order and ironing flags)
        slicer_flavor: Application that generated the source file

    Returns:
        OrcaSlicer settings to add to (and override in) the converted profile
    """
    params = resolve_speeds(source, slicer_flavor)
    params.update(expand_overhang_speeds(source))
    params['wall_infill_order'] = evaluate_print_order(
        tracked.get('external_perimeters_first'), tracked.get('infill_first'))
    params['ironing_type'] = evaluate_ironing_type(
        tracked.get('ironing'), tracked.get('ironing_type'))
    return params
