from __future__ import annotations

from django.db import models
from django.test import SimpleTestCase

from meta_search.errors import InvalidSearchConfigError, UnknownAttributeError
from meta_search.registry import get_registry
from meta_search.searchable import apply_search_config, apply_search_configs
from tests.models import Article, Contractor, Developer, Tag


class BrokenConfigWidget(models.Model):
    name = models.CharField(max_length=20)

    class Meta:
        app_label = "tests"

    class SearchConfig:
        searchable_attributes = 42


class UnknownColumnWidget(models.Model):
    name = models.CharField(max_length=20)

    class Meta:
        app_label = "tests"

    class SearchConfig:
        unsearchable_attributes = ["name", "colour"]


class ConfiguredWidget(models.Model):
    name = models.CharField(max_length=20)
    code = models.CharField(max_length=20)

    class Meta:
        app_label = "tests"

    class SearchConfig:
        searchable_attributes = "name"
        search_methods = ["by_code"]


class ApplySearchConfigTests(SimpleTestCase):
    def test_model_without_config(self) -> None:
        self.assertFalse(apply_search_config(Tag))

    def test_single_name_and_method_list(self) -> None:
        self.assertTrue(apply_search_config(ConfiguredWidget))

        current = get_registry(ConfiguredWidget)
        self.assertEqual(set(current.include_attributes), {"name"})
        self.assertEqual(set(current.methods), {"by_code"})

    def test_invalid_option_type(self) -> None:
        with self.assertRaises(InvalidSearchConfigError):
            apply_search_config(BrokenConfigWidget)

    def test_unknown_column_fails_fast(self) -> None:
        with self.assertRaises(UnknownAttributeError):
            apply_search_config(UnknownColumnWidget)

    def test_abstract_parent_config_applies_to_first_concrete_model(self) -> None:
        self.assertTrue(apply_search_config(Developer))
        self.assertFalse(apply_search_config(Contractor))

    def test_mapping_options_keep_conditions(self) -> None:
        rule = get_registry(Article).exclude_attributes["secret"]

        self.assertTrue(rule.applies({}))
        self.assertFalse(rule.applies({"is_admin": True}))

    def test_method_options_are_forwarded(self) -> None:
        methods = get_registry(Article).methods

        self.assertTrue(methods["with_tag_names"].method.splat)
        self.assertEqual(methods["published_after"].method.value_type, "date")
        self.assertTrue(methods["flagged_as"].authorization.applies({"role": "admin"}))
        self.assertFalse(methods["flagged_as"].authorization.applies({}))

    def test_apply_search_configs_reports_configured_models(self) -> None:
        labels = apply_search_configs([Article, Tag, ConfiguredWidget])

        self.assertEqual(labels, ["tests.Article", "tests.ConfiguredWidget"])
