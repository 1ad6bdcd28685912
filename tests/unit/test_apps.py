from django.apps import apps
from django.test import SimpleTestCase

from meta_search import registry
from meta_search.apps import MetaSearchConfig
from tests.models import Article, Comment, Contractor, Developer, Tag


class MetaSearchConfigTests(SimpleTestCase):
    def test_app_config_is_installed(self) -> None:
        config = apps.get_app_config("meta_search")

        self.assertIsInstance(config, MetaSearchConfig)

    def test_ready_applied_model_configs(self) -> None:
        article = registry.get_registry(Article)

        self.assertIn("secret", article.exclude_attributes)
        self.assertIn("tags", article.exclude_associations)
        self.assertIn("flagged_as", article.methods)
        self.assertIn("user_ip", registry.get_registry(Comment).exclude_attributes)

    def test_models_without_config_stay_empty(self) -> None:
        self.assertIs(registry.get_registry(Tag), registry.EMPTY_REGISTRY)

    def test_abstract_config_applies_to_concrete_child_only(self) -> None:
        self.assertIn(Developer, registry._registries)
        self.assertNotIn(Contractor, registry._registries)
        self.assertIs(registry.get_registry(Contractor), registry.get_registry(Developer))

    def test_ready_is_idempotent(self) -> None:
        before = registry.get_registry(Article)

        with self.assertLogs("meta_search.apps", level="DEBUG") as logs:
            apps.get_app_config("meta_search").ready()

        self.assertEqual(registry.get_registry(Article), before)
        self.assertIn("tests.Article", logs.records[0].context["models"])
