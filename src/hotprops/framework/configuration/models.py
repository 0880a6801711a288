"""
Store options model with validation.
"""

import codecs
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...domain.models import WatchBackend

# Rendering of the legacy default short date/time pattern "M/d/yy h:mm a"
DEFAULT_DATE_PATTERN = "%m/%d/%y %I:%M %p"
DEFAULT_OBFUSCATED_PLACEHOLDER = "******"
DEFAULT_POLL_INTERVAL = 1.0


class StoreOptions(BaseModel):
    """Options shared by reference across a PropertyStore."""
    model_config = ConfigDict(validate_assignment=True, extra='forbid', coerce_numbers_to_str=True)

    date_pattern: str = DEFAULT_DATE_PATTERN
    locale: Optional[str] = None
    hot_reload: bool = True
    obfuscated_property_pattern: Optional[str] = None
    obfuscated_property_placeholder: str = DEFAULT_OBFUSCATED_PLACEHOLDER
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0, le=3600)
    watch_backend: WatchBackend = WatchBackend.POLLING
    encoding: str = "iso-8859-1"
    properties_glob: str = Field(default="*.properties", min_length=1)

    @field_validator('date_pattern', 'obfuscated_property_placeholder')
    @classmethod
    def validate_not_blank(cls, v):
        """Reject blank patterns and placeholders."""
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator('locale', mode='before')
    @classmethod
    def validate_locale(cls, v):
        """Treat a blank locale as the process default."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('obfuscated_property_pattern', mode='before')
    @classmethod
    def validate_obfuscated_property_pattern(cls, v):
        """Ensure the obfuscation pattern is a valid regular expression."""
        if v is None:
            return None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str) and not v.strip():
            return None
        try:
            re.compile(v)
        except (re.error, TypeError) as e:
            raise ValueError(f"Invalid obfuscated property pattern: {e}") from e
        return v

    @field_validator('encoding')
    @classmethod
    def validate_encoding(cls, v):
        """Ensure the encoding is known to the codec registry."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v

    def is_obfuscated(self, key: str) -> bool:
        """Check whether ``key`` fully matches the obfuscation pattern."""
        pattern = self.obfuscated_property_pattern
        return pattern is not None and re.fullmatch(pattern, key) is not None
