import logging
from dataclasses import dataclass, field

from django_sitefleet.cache import template_cache
from django_sitefleet.conf import settings
from django_sitefleet.constants import constants
from django_sitefleet.content_types import (
    DERIVED_FIELDS,
    ContentTypeRepository,
    derive_defaults,
    record_table_name,
)
from django_sitefleet.exceptions import TemplateMetadataError
from django_sitefleet.schema.canonical import Block, Page, Template
from django_sitefleet.signals import content_types_discovered

from .templates import (
    infer_content_type,
    normalize_filename,
    parse_regions,
    scan_templates,
)

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    created: list = field(default_factory=list)
    updated: list = field(default_factory=list)
    stale: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    templates_synced: int = 0
    templates_pruned: list = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created or self.updated or self.stale)


@dataclass
class _ParsedArtifact:
    filename: str
    name: str
    content_type: str
    regions: list
    source: str


class ContentTypeDiscoveryEngine:
    """
    Turns template artifacts into content-type and template rows of one store.

    All writes of a run are committed together; a bad artifact is skipped and
    reported in ``DiscoveryResult.skipped`` instead of failing the run.
    """

    def __init__(self, store, reserved_folders=None):
        self.store = store
        self.reserved_folders = (
            tuple(reserved_folders)
            if reserved_folders is not None
            else settings.RESERVED_TEMPLATE_FOLDERS
        )

    def discover(self, artifacts, mark_stale=True, prune_templates=False):
        result = DiscoveryResult()
        parsed = self._drop_table_collisions(self._parse(artifacts, result), result)
        seen = {artifact.content_type for artifact in parsed if artifact.content_type}

        with self.store.atomic():
            self._register(seen, result)
            if mark_stale:
                self._mark_stale(seen, result)
            self._sync_templates(parsed, result)
            if prune_templates:
                self._prune_templates({artifact.filename for artifact in parsed}, result)

        logger.info(
            "Discovery on %s: created=%s updated=%s stale=%s skipped=%d templates=%d",
            self.store.store_name,
            result.created,
            result.updated,
            result.stale,
            len(result.skipped),
            result.templates_synced,
        )
        content_types_discovered.send(
            sender=self.__class__, store_name=self.store.store_name, result=result
        )
        template_cache.invalidate(self.store.store_name)
        return result

    def discover_from_root(self, root=None, **kwargs):
        root = root or settings.TEMPLATES_ROOT
        return self.discover(scan_templates(root), **kwargs)

    def _parse(self, artifacts, result):
        parsed = []
        for artifact in artifacts:
            filename = normalize_filename(artifact.filename)
            try:
                content_type = infer_content_type(filename, self.reserved_folders)
                regions = parse_regions(artifact.source)
            except TemplateMetadataError as exc:
                logger.warning("Skipping template %s: %s", filename, exc)
                result.skipped.append((filename, str(exc)))
                continue
            parsed.append(
                _ParsedArtifact(
                    filename=filename,
                    name=artifact.display_name,
                    content_type=content_type,
                    regions=regions,
                    source=artifact.source,
                )
            )
        return parsed

    def _drop_table_collisions(self, parsed, result):
        """Skip artifacts whose type would share a record table with another type."""
        owners = {
            record_table_name(definition.name): definition.name
            for definition in ContentTypeRepository(self.store).all()
        }
        for name in sorted({artifact.content_type for artifact in parsed if artifact.content_type}):
            owners.setdefault(record_table_name(name), name)

        kept = []
        for artifact in parsed:
            name = artifact.content_type
            table = record_table_name(name) if name else None
            if table is not None and owners[table] != name:
                reason = (
                    f"Content type '{name}' would share record table '{table}' "
                    f"with content type '{owners[table]}'."
                )
                logger.warning("Skipping template %s: %s", artifact.filename, reason)
                result.skipped.append((artifact.filename, reason))
                continue
            kept.append(artifact)
        return kept

    def _register(self, seen, result):
        repository = ContentTypeRepository(self.store)
        existing = {definition.name: definition for definition in repository.all()}

        for name in sorted(seen):
            if name in constants.SYSTEM_CONTENT_TYPES:
                continue

            defaults = derive_defaults(name)
            definition = existing.get(name)
            if definition is None:
                repository.create(name, **defaults)
                result.created.append(name)
                continue

            if definition.is_system:
                continue

            changed = [
                field_name
                for field_name in DERIVED_FIELDS
                if field_name not in definition.edited
                and getattr(definition, field_name) != defaults[field_name]
            ]
            for field_name in changed:
                setattr(definition, field_name, defaults[field_name])
            if definition.is_stale:
                definition.is_stale = False
                changed.append("is_stale")

            if changed:
                definition.save(update_fields=changed + ["updated_at"])
                result.updated.append(name)

    def _mark_stale(self, seen, result):
        repository = ContentTypeRepository(self.store)
        for definition in repository.non_system():
            if definition.name in seen or definition.is_stale:
                continue
            definition.is_stale = True
            definition.save(update_fields=["is_stale", "updated_at"])
            result.stale.append(definition.name)
            logger.warning(
                "Content type %s on %s has no templates left; flagged stale",
                definition.name,
                self.store.store_name,
            )

    def _sync_templates(self, parsed, result):
        templates = self.store.manager(Template)
        existing = {template.filename: template for template in templates.all()}

        for artifact in parsed:
            values = {
                "name": artifact.name,
                "content_type": artifact.content_type,
                "regions": artifact.regions,
                "content": artifact.source,
            }
            template = existing.get(artifact.filename)
            if template is None:
                templates.create(filename=artifact.filename, **values)
                result.templates_synced += 1
                continue

            changed = [
                field_name
                for field_name, value in values.items()
                if getattr(template, field_name) != value
            ]
            if changed:
                for field_name in changed:
                    setattr(template, field_name, values[field_name])
                template.save(update_fields=changed + ["updated_at"])
                result.templates_synced += 1

    def _prune_templates(self, present, result):
        templates = self.store.manager(Template)
        referenced = set()
        for model in (Page, Block):
            referenced.update(
                self.store.manager(model)
                .exclude(template_id=None)
                .values_list("template_id", flat=True)
            )

        for template in templates.exclude(filename__in=present):
            if template.pk in referenced:
                logger.warning(
                    "Keeping template %s on %s: still used by pages or blocks",
                    template.filename,
                    self.store.store_name,
                )
                continue
            template.delete()
            result.templates_pruned.append(template.filename)
