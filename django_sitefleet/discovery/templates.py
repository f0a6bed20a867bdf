"""
Template artifacts and the metadata read from them.

Templates are never rendered here. Discovery only needs three things from a
template: the relative filename, the content type its folder implies, and the
editable regions it declares through ``data-cms-*`` attributes::

    <h1 data-cms-region="hero_title" data-cms-type="text">...</h1>
    <ul data-cms-region="features" data-cms-type="repeater"
        data-cms-fields="[{&quot;name&quot;: &quot;title&quot;}]">...</ul>
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from django_sitefleet.conf import settings
from django_sitefleet.content_types import titleize
from django_sitefleet.exceptions import TemplateMetadataError
from django_sitefleet.validators import is_valid_content_type_name

logger = logging.getLogger(__name__)

REGION_PATTERN = re.compile(r"""data-cms-region=["']([^"']+)["'][^>]*>""", re.IGNORECASE)


@dataclass(frozen=True)
class TemplateArtifact:
    filename: str
    source: str

    @property
    def display_name(self) -> str:
        """``pages/homepage.njk`` -> ``Homepage``"""
        return titleize(PurePosixPath(self.filename).stem)


def normalize_filename(filename: str) -> str:
    return filename.replace("\\", "/").lstrip("/")


def infer_content_type(filename, reserved_folders=None):
    """
    Content type implied by a template's location beneath the templates root.

    The first folder names the content type: ``blog/post.njk`` -> ``blog``.
    Files at the root or under a reserved folder (``layouts``, ``partials``)
    are global and return ``None``. Raises ``TemplateMetadataError`` when the
    folder name is not a usable content-type name.
    """
    if reserved_folders is None:
        reserved_folders = settings.RESERVED_TEMPLATE_FOLDERS

    parts = PurePosixPath(normalize_filename(filename)).parts
    if len(parts) < 2:
        return None

    folder = parts[0]
    if folder in reserved_folders:
        return None

    if not is_valid_content_type_name(folder):
        raise TemplateMetadataError(
            f"Folder '{folder}' is not a valid content type name."
        )
    return folder


def _attribute(tag, name):
    match = re.search(rf"""{name}=("([^"]*)"|'([^']*)')""", tag, re.IGNORECASE)
    if match is None:
        return None
    return match.group(2) if match.group(2) is not None else match.group(3)


def parse_regions(source):
    """
    Editable regions declared in ``source``, first declaration wins.

    Each region is a dict with ``name``, ``type`` (default ``text``),
    ``label``, ``required``, ``placeholder`` and, for repeaters, ``fields``.
    """
    regions = []
    seen = set()
    for match in REGION_PATTERN.finditer(source):
        name, tag = match.group(1), match.group(0)
        if name in seen:
            continue
        seen.add(name)

        region = {
            "name": name,
            "type": _attribute(tag, "data-cms-type") or "text",
            "label": _attribute(tag, "data-cms-label") or titleize(name),
            "required": _attribute(tag, "data-cms-required") == "true",
            "placeholder": _attribute(tag, "data-cms-placeholder") or "",
        }
        if region["type"] == "repeater":
            region["fields"] = _repeater_fields(name, _attribute(tag, "data-cms-fields"))
        regions.append(region)
    return regions


def _repeater_fields(region_name, raw):
    if not raw:
        return []
    try:
        fields = json.loads(raw.replace("&quot;", '"'))
    except ValueError as exc:
        raise TemplateMetadataError(
            f"Repeater '{region_name}' has invalid data-cms-fields: {exc}"
        ) from exc
    if not isinstance(fields, list):
        raise TemplateMetadataError(
            f"Repeater '{region_name}' data-cms-fields must be a list."
        )
    return fields


def scan_templates(root, extensions=None, ignored_folders=None):
    """Read every template file beneath ``root``, sorted by filename."""
    root = Path(root)
    if extensions is None:
        extensions = settings.TEMPLATE_EXTENSIONS
    if ignored_folders is None:
        ignored_folders = settings.IGNORED_TEMPLATE_FOLDERS

    if not root.is_dir():
        logger.warning("Templates root %s does not exist", root)
        return []

    artifacts = []
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix not in extensions:
            continue
        relative = path.relative_to(root)
        if any(part in ignored_folders for part in relative.parts[:-1]):
            continue
        artifacts.append(
            TemplateArtifact(
                filename=relative.as_posix(),
                source=path.read_text(encoding="utf-8"),
            )
        )
    return artifacts
