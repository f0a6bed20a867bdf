import json
import logging

from django.contrib.auth.hashers import make_password
from django.db import DatabaseError
from django.utils import timezone

from .conf import settings
from .exceptions import SeedError
from .schema.canonical import Content, Page, SiteSetting, StoreUser, Template

logger = logging.getLogger(__name__)

ACTIVE_THEME_KEY = "active_theme"
HOME_PAGE_KEY = "home_page_id"

STARTER_PAGES = (
    # (template stem, title, slug, marks home page)
    ("pages/homepage.", "Home", "home", True),
    ("pages/standard.", "About", "about", False),
)


class BaselineSeeder:
    """Writes the rows every fresh store starts with."""

    def seed(self, store, admin_email=None, admin_password=None):
        admin_email = admin_email or settings.DEFAULT_ADMIN_EMAIL
        admin_password = admin_password or settings.DEFAULT_ADMIN_PASSWORD

        try:
            with store.atomic():
                store.manager(SiteSetting).update_or_create(
                    setting_key=ACTIVE_THEME_KEY,
                    defaults={"setting_value": settings.DEFAULT_THEME},
                )
                store.manager(StoreUser).update_or_create(
                    email=admin_email,
                    defaults={
                        "password": make_password(admin_password),
                        "name": "Admin",
                        "role": "admin",
                    },
                )
        except DatabaseError as exc:
            raise SeedError(f"Could not seed {store.store_name}: {exc}") from exc

        logger.info("Seeded %s with admin user %s", store.store_name, admin_email)

    def seed_starter_pages(self, store):
        """
        Home and About pages for stores whose templates provide
        ``pages/homepage.*`` and ``pages/standard.*``. Returns the created slugs.
        """
        created = []
        try:
            with store.atomic():
                for prefix, title, slug, is_home in STARTER_PAGES:
                    page = self._starter_page(store, prefix, title, slug)
                    if page is None:
                        continue
                    created.append(slug)
                    if is_home:
                        store.manager(SiteSetting).update_or_create(
                            setting_key=HOME_PAGE_KEY,
                            defaults={"setting_value": str(page.pk)},
                        )
        except DatabaseError as exc:
            raise SeedError(
                f"Could not seed starter pages for {store.store_name}: {exc}"
            ) from exc

        if created:
            logger.info("Seeded starter pages %s on %s", created, store.store_name)
        return created

    def _starter_page(self, store, prefix, title, slug):
        template = (
            store.manager(Template)
            .filter(filename__startswith=prefix)
            .order_by("filename")
            .first()
        )
        if template is None or store.manager(Page).filter(slug=slug).exists():
            return None

        data = {region["name"]: "" for region in template.regions or []}
        content = store.manager(Content).create(
            module="pages", title=title, slug=slug, data=json.dumps(data)
        )
        return store.manager(Page).create(
            template_id=template.pk,
            content_id=content.pk,
            title=title,
            slug=slug,
            status="published",
            published_at=timezone.now(),
        )
