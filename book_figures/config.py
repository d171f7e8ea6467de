"""Caption configuration and per-image settings resolution.

The configuration surface mirrors the ``image-captions`` entry of a
GitBook ``book.json``::

    {
      "caption": "Figure: _CAPTION_",
      "list_caption": "List image _BOOK_IMAGE_NUMBER_: _CAPTION_",
      "align": "left",
      "attributes": {"width": "300"},
      "variable_name": "pictures",
      "images": {
        "1.1.2": {"caption": "...", "attributes": {"width": "400"}},
        "1.3.1": {"skip": true}
      }
    }

Every field is optional.  Parsing never fails: values of the wrong type
and ``images`` keys that are not ``<level>.<number>`` are dropped and
logged at DEBUG level.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from book_figures.caption import DEFAULT_CAPTION
from book_figures.models import parse_level

_log = logging.getLogger("config")


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _opt_str(raw: Mapping[str, Any], name: str) -> str | None:
    value = raw.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        _log.debug("Ignoring non-string %r option: %r", name, value)
        return None
    return value


def _attributes(raw: Mapping[str, Any], name: str = "attributes") -> dict[str, str | None]:
    """Parse an attribute mapping, stringifying scalar values.

    ``None`` values are kept so that a per-image override can remove a
    default attribute.
    """
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        _log.debug("Ignoring non-mapping %r option: %r", name, value)
        return {}
    attrs: dict[str, str | None] = {}
    for key, val in value.items():
        if val is None:
            attrs[str(key)] = None
        elif isinstance(val, bool):
            attrs[str(key)] = "true" if val else "false"
        elif isinstance(val, (str, int, float)):
            attrs[str(key)] = str(val)
        else:
            _log.debug("Ignoring attribute %r with value %r", key, val)
    return attrs


def is_image_key(key: str) -> bool:
    """Whether *key* has the ``<level>.<number>`` shape, e.g. ``1.2.3``."""
    level = parse_level(key)
    return level is not None and len(level) >= 2


# ---------------------------------------------------------------------------
# Configuration objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImageOverride:
    """Settings for one image, keyed by ``"<page level>.<image number>"``."""

    caption: str | None = None
    list_caption: str | None = None
    align: str | None = None
    attributes: dict[str, str | None] = field(default_factory=dict)
    skip: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ImageOverride:
        skip = raw.get("skip", False)
        return cls(
            caption=_opt_str(raw, "caption"),
            list_caption=_opt_str(raw, "list_caption"),
            align=_opt_str(raw, "align"),
            attributes=_attributes(raw),
            skip=skip is True,
        )


@dataclass(frozen=True)
class CaptionsConfig:
    """Global caption configuration for one build."""

    caption: str = DEFAULT_CAPTION
    list_caption: str | None = None
    """Registry caption template; ``None`` means "same as ``caption``"."""
    align: str | None = None
    attributes: dict[str, str | None] = field(default_factory=dict)
    variable_name: str | None = None
    """Name of the registry placeholder; ``None`` disables registries."""
    images: dict[str, ImageOverride] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> CaptionsConfig:
        """Build a configuration from a plain mapping, defaulting freely."""
        if not isinstance(raw, Mapping):
            if raw is not None:
                _log.debug("Ignoring non-mapping configuration: %r", raw)
            return cls()

        caption = _opt_str(raw, "caption")
        variable_name = _opt_str(raw, "variable_name")

        images: dict[str, ImageOverride] = {}
        raw_images = raw.get("images")
        if isinstance(raw_images, Mapping):
            for key, value in raw_images.items():
                if not isinstance(key, str) or not is_image_key(key):
                    _log.debug("Ignoring malformed image key %r", key)
                    continue
                if not isinstance(value, Mapping):
                    _log.debug("Ignoring non-mapping override for %s", key)
                    continue
                images[key.strip()] = ImageOverride.from_mapping(value)
        elif raw_images is not None:
            _log.debug("Ignoring non-mapping 'images' option: %r", raw_images)

        return cls(
            caption=DEFAULT_CAPTION if caption is None else caption,
            list_caption=_opt_str(raw, "list_caption"),
            align=_opt_str(raw, "align") or None,
            attributes=_attributes(raw),
            variable_name=variable_name or None,
            images=images,
        )

    @property
    def registry_enabled(self) -> bool:
        return self.variable_name is not None


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EffectiveSettings:
    """Resolved settings for one numbered image."""

    caption_template: str
    list_caption_template: str
    alignment: str | None
    attributes: dict[str, str]
    skip: bool = False


def resolve_settings(config: CaptionsConfig, key: str) -> EffectiveSettings:
    """Merge global configuration with the override stored under *key*.

    Every field the override specifies wins over the global value;
    attributes are merged key by key.
    """
    override = config.images.get(key, ImageOverride())

    caption = override.caption if override.caption is not None else config.caption
    if override.list_caption is not None:
        list_caption = override.list_caption
    elif config.list_caption is not None:
        list_caption = config.list_caption
    else:
        list_caption = caption

    merged = {**config.attributes, **override.attributes}
    attributes = {k: v for k, v in merged.items() if v is not None}

    return EffectiveSettings(
        caption_template=caption,
        list_caption_template=list_caption,
        alignment=override.align or config.align,
        attributes=attributes,
        skip=override.skip,
    )
