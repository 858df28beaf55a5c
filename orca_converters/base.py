"""
Base converter classes for converting SuperSlicer/PrusaSlicer INI settings to OrcaSlicer JSON.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Tuple

from orca_converters.values import is_truthy, multivalue_to_array

logger = logging.getLogger(__name__)

# Source value meaning "let OrcaSlicer use its own default"
NIL_VALUE = 'nil'


class ConversionContext:
    """Per-file state shared by the transforms of one profile conversion."""

    def __init__(self, source: Dict[str, str] = None, slicer_flavor: str = None,
                 nozzle_size=None, profile_name: str = '',
                 keep_condition: Callable[[str, str], bool] = None):
        """
        Args:
            source: All key/value pairs of the source INI file
            slicer_flavor: Application that generated the source file
            nozzle_size: Nozzle diameter used to resolve nozzle-relative values
            profile_name: Name of the profile, used in prompts
            keep_condition: Function(key, value) -> bool deciding whether a
                            compatibility condition string is kept
        """
        self.source = source or {}
        self.slicer_flavor = slicer_flavor
        self.nozzle_size = nozzle_size
        self.profile_name = profile_name
        self.keep_condition = keep_condition or (lambda key, value: True)
        self.converted: Dict[str, Any] = {}
        self.tracked: Dict[str, Any] = {}
        self.max_temperature = 0


class ConversionResult:
    """Result of a setting conversion, can contain multiple key-value pairs."""

    def __init__(self):
        self.settings: Dict[str, Any] = {}
        self.needs_manual_conversion: List[str] = []

    def add_setting(self, key: str, value: Any):
        """Add a converted setting. None means "emit nothing"."""
        if value is not None:
            self.settings[key] = value

    def mark_needs_conversion(self, key: str):
        """Mark a key no converter knows about."""
        self.needs_manual_conversion.append(key)

    def merge(self, other: 'ConversionResult'):
        """Merge another ConversionResult into this one."""
        self.settings.update(other.settings)
        self.needs_manual_conversion.extend(other.needs_manual_conversion)


class BaseConverter(ABC):
    """Base class for all setting converters."""

    @abstractmethod
    def can_convert(self, source_key: str) -> bool:
        """Check if this converter can handle the given key."""
        pass

    @abstractmethod
    def convert(self, source_key: str, source_value: Any,
                context: ConversionContext) -> ConversionResult:
        """
        Convert a source setting to OrcaSlicer format.
        Returns a ConversionResult that may contain multiple settings.
        """
        pass


class SimpleKeyConverter(BaseConverter):
    """Converter for 1:1 key mappings with optional value transformation."""

    def __init__(self, source_key: str, orca_key: str, value_transform=None):
        """
        Args:
            source_key: The INI key to match
            orca_key: The OrcaSlicer key to output
            value_transform: Optional function(value, context) returning the
                             new value, or None to emit nothing
        """
        self.source_key = source_key
        self.orca_key = orca_key
        self.value_transform = value_transform

    def can_convert(self, source_key: str) -> bool:
        return source_key == self.source_key

    def convert(self, source_key: str, source_value: Any,
                context: ConversionContext) -> ConversionResult:
        result = ConversionResult()
        if self.value_transform:
            value = self.value_transform(source_value, context)
        else:
            value = source_value
        result.add_setting(self.orca_key, value)
        return result


class SplitConverter(BaseConverter):
    """Converter that fans one source setting out to several OrcaSlicer settings."""

    def __init__(self, source_key: str, orca_keys: List[str]):
        self.source_key = source_key
        self.orca_keys = orca_keys

    def can_convert(self, source_key: str) -> bool:
        return source_key == self.source_key

    def convert(self, source_key: str, source_value: Any,
                context: ConversionContext) -> ConversionResult:
        result = ConversionResult()
        for orca_key in self.orca_keys:
            result.add_setting(orca_key, source_value)
        return result


class TrackedKeyConverter(BaseConverter):
    """
    Converter that records a value in the context instead of emitting it.

    Used for settings that only make sense in combination with others
    (e.g. two booleans that together select one OrcaSlicer dropdown value).
    """

    def __init__(self, source_key: str, as_flag: bool = True):
        self.source_key = source_key
        self.as_flag = as_flag

    def can_convert(self, source_key: str) -> bool:
        return source_key == self.source_key

    def convert(self, source_key: str, source_value: Any,
                context: ConversionContext) -> ConversionResult:
        if self.as_flag:
            context.tracked[source_key] = is_truthy(source_value)
        else:
            context.tracked[source_key] = source_value
        return ConversionResult()


class CustomConverter(BaseConverter):
    """Converter for custom conversion logic."""

    def __init__(self, source_key: str, convert_func: Callable):
        """
        Args:
            source_key: The INI key to match
            convert_func: Function(source_value, context) -> ConversionResult
        """
        self.source_key = source_key
        self.convert_func = convert_func

    def can_convert(self, source_key: str) -> bool:
        return source_key == self.source_key

    def convert(self, source_key: str, source_value: Any,
                context: ConversionContext) -> ConversionResult:
        return self.convert_func(source_value, context)


class ConverterRegistry:
    """Registry that manages all converters and performs conversions."""

    def __init__(self, profile_type: str = None):
        self.profile_type = profile_type
        self.converters: List[BaseConverter] = []
        self.multivalue_keys: Dict[str, str] = {}
        self._orca_key_mappings: Dict[str, str] = {}  # orca_key -> source_key, to detect conflicts
        self._mutually_exclusive_groups: Dict[str, set] = {}  # orca_key -> allowed source keys

    def register(self, converter: BaseConverter):
        """Register a converter."""
        self.converters.append(converter)

    def register_simple(self, source_key: str, orca_key: str, value_transform=None):
        """Convenience method to register a simple key mapping."""
        if orca_key in self._orca_key_mappings:
            existing_key = self._orca_key_mappings[orca_key]
            if existing_key != source_key:
                allowed_keys = self._mutually_exclusive_groups.get(orca_key)
                if allowed_keys is None or source_key not in allowed_keys:
                    raise ValueError(
                        f"Duplicate mapping detected: OrcaSlicer key '{orca_key}' is already "
                        f"mapped from '{existing_key}', cannot also map from '{source_key}'"
                    )
                self._orca_key_mappings[orca_key] = source_key
        else:
            self._orca_key_mappings[orca_key] = source_key

        self.register(SimpleKeyConverter(source_key, orca_key, value_transform))

    def register_renames(self, mapping: Dict[str, str]):
        """Register a batch of plain renames."""
        for source_key, orca_key in mapping.items():
            self.register_simple(source_key, orca_key)

    def register_split(self, source_key: str, orca_keys: List[str]):
        """Convenience method to register a fan-out converter."""
        self.register(SplitConverter(source_key, orca_keys))

    def register_tracked(self, *source_keys: str, as_flag: bool = True):
        """Register settings that are kept in the context for later evaluation."""
        for source_key in source_keys:
            self.register(TrackedKeyConverter(source_key, as_flag))

    def register_custom(self, source_key: str, convert_func: Callable):
        """Convenience method to register a custom converter."""
        self.register(CustomConverter(source_key, convert_func))

    def register_multivalue(self, mode: str, *source_keys: str):
        """
        Register settings that may hold one value per extruder.

        Args:
            mode: 'array' keeps every value as a list, 'single' keeps the first
            source_keys: The INI keys this applies to
        """
        if mode not in ('array', 'single'):
            raise ValueError(f"Unknown multivalue mode: {mode}")
        for source_key in source_keys:
            self.multivalue_keys[source_key] = mode

    def register_mutually_exclusive(self, orca_key: str, *source_keys: str):
        """Register a group of mutually exclusive source keys that map to the same OrcaSlicer key."""
        if orca_key in self._mutually_exclusive_groups:
            self._mutually_exclusive_groups[orca_key].update(source_keys)
        else:
            self._mutually_exclusive_groups[orca_key] = set(source_keys)

    def handles(self, source_key: str) -> bool:
        """Check whether any registered converter knows the given key."""
        return any(converter.can_convert(source_key) for converter in self.converters)

    def count_known_keys(self, settings: Dict[str, Any]) -> int:
        """Count how many keys of a settings dict this registry can translate."""
        return sum(1 for key in settings if self.handles(key))

    def normalize_value(self, source_key: str, source_value: Any) -> Any:
        """Split multi-extruder values according to the registered multivalue mode."""
        mode = self.multivalue_keys.get(source_key)
        if mode is None or not isinstance(source_value, str):
            return source_value
        values = multivalue_to_array(source_value)
        if mode == 'single':
            return values[0] if values else ''
        return values

    def convert_setting(self, source_key: str, source_value: Any,
                        context: ConversionContext) -> ConversionResult:
        """
        Convert a single setting using registered converters.

        All matching converters are applied and their results merged.
        """
        merged_result = ConversionResult()

        # 'nil' means OrcaSlicer should use its own default
        if source_value == NIL_VALUE:
            return merged_result

        value = self.normalize_value(source_key, source_value)
        found_converter = False

        for converter in self.converters:
            if converter.can_convert(source_key):
                result = converter.convert(source_key, value, context)
                merged_result.merge(result)
                found_converter = True

        if not found_converter:
            merged_result.mark_needs_conversion(source_key)

        return merged_result

    def convert_dict(self, settings: Dict[str, Any],
                     context: ConversionContext) -> Tuple[Dict[str, Any], List[str]]:
        """
        Convert a dictionary of settings.
        Returns (converted_settings, unknown_keys)
        """
        needs_conversion = []

        for key, value in settings.items():
            result = self.convert_setting(key, value, context)
            context.converted.update(result.settings)
            needs_conversion.extend(result.needs_manual_conversion)

        if needs_conversion:
            logger.debug(f"{len(needs_conversion)} {self.profile_type or ''} settings have "
                         f"no OrcaSlicer equivalent: {', '.join(sorted(needs_conversion))}")

        return context.converted, needs_conversion
