"""
Catalog enumerations.

Brand values are the display names used on the wire; Size values are the
member names, with the bottle volume available as ``Size.volume``.
"""

import math
from enum import Enum
from typing import Any


class Brand(str, Enum):
    """Product brand."""
    ARMANI = 'Giorgio Armani'
    CHANEL = 'Chanel'
    DIOR = 'Dior'
    DOLCE = 'Dolce & Gabbana'
    ENGLISH_LAUNDRY = 'English Laundry'
    GUCCI = 'Gucci'
    HUGO_BOSS = 'Hugo Boss'
    VERSACE = 'Versace'

    @property
    def brand_name(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: Any) -> 'Brand':
        """
        Resolve a brand from its member name or display name.

        Both lookups ignore case and surrounding whitespace, so
        ``'english laundry'``, ``'ENGLISH_LAUNDRY'`` and
        ``Brand.ENGLISH_LAUNDRY`` all resolve to the same member.

        Raises:
            ValueError: If no brand matches
        """
        if isinstance(raw, cls):
            return raw

        text = str(raw).strip()
        for brand in cls:
            if text.upper() == brand.name or text.lower() == brand.value.lower():
                return brand

        raise ValueError(
            f"Unknown brand '{raw}'. "
            f"Allowed brands: {', '.join(b.value for b in cls)}"
        )

    @classmethod
    def _missing_(cls, value):
        try:
            return cls.parse(value)
        except ValueError:
            return None


def _whole_volume(number: float, raw: Any) -> int:
    if not math.isfinite(number) or not number.is_integer():
        raise ValueError(f"Unknown size '{raw}'")
    return int(number)


class Size(str, Enum):
    """Bottle volume in millilitres."""
    SIZE_30 = 'SIZE_30'
    SIZE_50 = 'SIZE_50'
    SIZE_75 = 'SIZE_75'
    SIZE_100 = 'SIZE_100'
    SIZE_125 = 'SIZE_125'
    SIZE_150 = 'SIZE_150'
    SIZE_200 = 'SIZE_200'

    @property
    def volume(self) -> int:
        return int(self.name.split('_', 1)[1])

    @classmethod
    def parse(cls, raw: Any) -> 'Size':
        """
        Resolve a size from its member name or its volume.

        Spreadsheets hand volumes over as ``int``, ``float`` or ``str``,
        so ``50``, ``50.0``, ``'50'`` and ``'SIZE_50'`` are all accepted.

        Raises:
            ValueError: If no size matches
        """
        if isinstance(raw, cls):
            return raw

        if isinstance(raw, bool):
            raise ValueError(f"Unknown size '{raw}'")

        if isinstance(raw, int):
            volume = raw
        elif isinstance(raw, float):
            volume = _whole_volume(raw, raw)
        else:
            text = str(raw).strip().upper()
            if text in cls.__members__:
                return cls[text]
            try:
                number = float(text)
            except ValueError:
                raise ValueError(f"Unknown size '{raw}'") from None
            volume = _whole_volume(number, raw)

        for size in cls:
            if size.volume == volume:
                return size

        raise ValueError(f"Unknown size '{raw}'")

    @classmethod
    def _missing_(cls, value):
        try:
            return cls.parse(value)
        except ValueError:
            return None
