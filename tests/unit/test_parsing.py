from __future__ import annotations

from django.db.models import Q
from django.test import SimpleTestCase

from meta_search.parsing import (
    AttributePath,
    resolve_attribute,
    resolve_condition,
    resolve_sort,
)
from meta_search.registry import assoc_searchable
from meta_search.wheres import Where, register_where
from tests.models import Article, Comment, Contractor, Developer


class ResolveAttributeTests(SimpleTestCase):
    def test_plain_attribute(self) -> None:
        self.assertEqual(
            resolve_attribute(Article, "title", {}),
            AttributePath(Article, (), "title"),
        )

    def test_foreign_key_column(self) -> None:
        self.assertEqual(resolve_attribute(Article, "author_id", {}).lookup, "author_id")

    def test_reverse_association_is_multi_valued(self) -> None:
        path = resolve_attribute(Article, "comments_body", {})

        self.assertEqual(path.model, Comment)
        self.assertEqual(path.associations, ("comments",))
        self.assertEqual(path.lookup, "comments__body")
        self.assertTrue(path.multi_valued)

    def test_forward_association_is_single_valued(self) -> None:
        path = resolve_attribute(Article, "author_name", {})

        self.assertEqual(path.lookup, "author__name")
        self.assertFalse(path.multi_valued)

    def test_nested_associations(self) -> None:
        path = resolve_attribute(Article, "author_articles_title", {})

        self.assertEqual(path.lookup, "author__articles__title")
        self.assertEqual(path.model, Article)
        self.assertTrue(path.multi_valued)

    def test_excluded_attribute_on_associated_model(self) -> None:
        self.assertIsNone(resolve_attribute(Article, "comments_user_ip", {}))

    def test_whitelist_on_associated_model(self) -> None:
        self.assertIsNone(resolve_attribute(Article, "author_salary", {}))
        self.assertIsNotNone(resolve_attribute(Article, "author_email", {}))

    def test_conditional_attribute(self) -> None:
        self.assertIsNone(resolve_attribute(Article, "secret", {}))
        self.assertIsNotNone(resolve_attribute(Article, "secret", {"is_admin": True}))

    def test_conditional_association(self) -> None:
        self.assertIsNone(resolve_attribute(Article, "tags_name", {"role": "guest"}))
        self.assertEqual(
            resolve_attribute(Article, "tags_name", {"role": "member"}).lookup,
            "tags__name",
        )

    def test_association_whitelist_blocks_other_associations(self) -> None:
        assoc_searchable(Article, "author")

        self.assertIsNotNone(resolve_attribute(Article, "author_name", {}))
        self.assertIsNone(resolve_attribute(Article, "comments_body", {}))
        self.assertIsNone(resolve_attribute(Article, "tags_name", {"role": "member"}))

    def test_inherited_exclusions_apply_to_subclasses(self) -> None:
        self.assertIsNone(resolve_attribute(Developer, "salary", {}))
        self.assertIsNone(resolve_attribute(Contractor, "salary", {}))
        self.assertEqual(
            resolve_attribute(Contractor, "company_name", {}).lookup, "company__name"
        )

    def test_unknown_names(self) -> None:
        self.assertIsNone(resolve_attribute(Article, "nonsense", {}))
        self.assertIsNone(resolve_attribute(Article, "comments_", {}))
        self.assertIsNone(resolve_attribute(Article, "comments_nonsense", {}))


class ResolveConditionTests(SimpleTestCase):
    def test_condition_for_association_path(self) -> None:
        condition = resolve_condition(Article, "comments_created_at_greater_than", {})

        self.assertEqual(condition.key, "comments_created_at_greater_than")
        self.assertEqual(condition.where.name, "greater_than")
        self.assertEqual(condition.target.lookup, "comments__created_at")

    def test_condition_builds_clause(self) -> None:
        condition = resolve_condition(Article, "title_starts_with", {})

        self.assertEqual(condition.clause("Dj"), Q(title__istartswith="Dj"))

    def test_clause_is_none_for_values_meaning_not_specified(self) -> None:
        condition = resolve_condition(Article, "subtitle_is_null", {})

        self.assertIsNone(condition.clause("0"))

    def test_falls_back_to_shorter_where_when_longer_does_not_resolve(self) -> None:
        register_where(Where("on_equals", lookup="exact"))

        condition = resolve_condition(Article, "published_on_equals", {})

        self.assertEqual(condition.where.name, "equals")
        self.assertEqual(condition.target.attribute, "published_on")

    def test_unresolvable_keys(self) -> None:
        self.assertIsNone(resolve_condition(Article, "title", {}))
        self.assertIsNone(resolve_condition(Article, "nonsense_equals", {}))
        self.assertIsNone(resolve_condition(Article, "secret_equals", {}))

    def test_where_must_fit_the_column_type(self) -> None:
        self.assertIsNone(resolve_condition(Article, "published_on_is_true", {}))
        self.assertIsNone(resolve_condition(Article, "flagged_contains", {}))
        self.assertIsNone(resolve_condition(Article, "title_is_false", {}))
        self.assertIsNone(resolve_condition(Article, "author_id_starts_with", {}))
        self.assertIsNone(
            resolve_condition(Article, "comments_created_at_is_blank", {})
        )

    def test_where_accepted_for_matching_column_type(self) -> None:
        self.assertEqual(
            resolve_condition(Article, "flagged_is_true", {}).where.name, "is_true"
        )
        self.assertEqual(
            resolve_condition(Article, "subtitle_is_blank", {}).where.name, "is_blank"
        )
        self.assertEqual(
            resolve_condition(Article, "author_id_equals", {}).target.lookup,
            "author_id",
        )


class ResolveSortTests(SimpleTestCase):
    def test_directions(self) -> None:
        self.assertEqual(resolve_sort(Article, "title.desc", {}), "-title")
        self.assertEqual(resolve_sort(Article, "title.asc", {}), "title")
        self.assertEqual(resolve_sort(Article, "title", {}), "title")
        self.assertEqual(resolve_sort(Article, "title.DESC", {}), "-title")

    def test_association_sort(self) -> None:
        self.assertEqual(resolve_sort(Article, "author_name.asc", {}), "author__name")

    def test_rejected_sorts(self) -> None:
        self.assertIsNone(resolve_sort(Article, "title.sideways", {}))
        self.assertIsNone(resolve_sort(Article, "secret.asc", {}))
        self.assertIsNone(resolve_sort(Article, "  ", {}))
        self.assertIsNone(resolve_sort(Article, "author_salary.desc", {}))

    def test_sorts_through_multi_valued_associations_are_rejected(self) -> None:
        self.assertIsNone(resolve_sort(Article, "comments_body.asc", {}))
        self.assertIsNone(resolve_sort(Article, "tags_name.desc", {}))
        self.assertEqual(
            resolve_sort(Comment, "article_title.desc", {}), "-article__title"
        )
