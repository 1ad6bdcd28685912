from django.apps import AppConfig, apps

from meta_search.logging import get_logger

logger = get_logger("apps")


class MetaSearchConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "meta_search"
    verbose_name = "Meta search"

    def ready(self) -> None:
        """Apply the inner ``SearchConfig`` declarations of all installed models."""
        from meta_search.searchable import apply_search_configs

        configured = apply_search_configs(apps.get_models())
        logger.debug(
            "search configurations applied",
            context={"models": configured},
        )
