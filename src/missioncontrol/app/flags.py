"""Feature flag parser using the ``MISSIONCONTROL_FEATURES`` environment variable."""

from __future__ import annotations

from collections.abc import Iterable

ENV_VAR = "MISSIONCONTROL_FEATURES"

_FALSE_VALUES = {"0", "false", "off", "no", "disable", "disabled"}
_TRUE_VALUES = {"1", "true", "on", "yes", "enable", "enabled"}


def _normalise(name: str) -> str:
    return name.strip().lower().replace("-", "_")


def _tokenise(raw: str) -> Iterable[str]:
    for token in raw.split(","):
        clean = token.strip()
        if clean:
            yield clean


def _parse_bool(value: str) -> bool | None:
    normalised = value.strip().lower()
    if normalised in _TRUE_VALUES:
        return True
    if normalised in _FALSE_VALUES:
        return False
    return None


def parse_features(raw: str) -> dict[str, bool]:
    """Parse a comma-separated feature string into a name -> enabled map.

    ``wal`` enables, ``!wal`` / ``-wal`` disables, ``wal=off`` sets explicitly.
    Tokens with an unparseable value are dropped.
    """

    features: dict[str, bool] = {}
    for token in _tokenise(raw):
        if token.startswith(("!", "-")):
            features[_normalise(token[1:])] = False
            continue
        if "=" in token:
            key, value = token.split("=", 1)
            parsed = _parse_bool(value)
            if parsed is None:
                continue
            features[_normalise(key)] = parsed
            continue
        features[_normalise(token)] = True
    return features
