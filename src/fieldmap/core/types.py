"""Type aliases used across fieldmap."""

from __future__ import annotations

Header = str
TargetValue = str
RawRow = dict[Header, str | None]
FinalMapping = dict[Header, TargetValue]
