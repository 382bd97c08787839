"""PredicateBuilder and positional assembly."""
import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from catalog.domain.exceptions import InvalidFilterValue
from catalog.models import CourseLevel
from catalog.search import build_entities
from catalog.search.dialect import PostgresTextSearch, SqliteTextSearch, sanitize_query
from catalog.search.locale import Locale
from catalog.search.predicates import (
    PredicateBuilder,
    PredicateFragment,
    assemble,
    escape_like,
    where_clause,
)

NOW = datetime(2026, 6, 1, 12, 0, 0)
ENTITIES = build_entities()


def _builder(entity="course", locale=Locale.EN, dialect=None, **kw):
    return PredicateBuilder(
        ENTITIES[entity], locale, dialect or SqliteTextSearch(), now=NOW, **kw,
    )


def _bound(builder):
    return assemble(["SELECT 1 FROM t", *where_clause(builder.build())])


def _placeholders(sql):
    return [int(n) for n in re.findall(r":p(\d+)", sql)]


class TestAssemble:
    def test_numbers_placeholders_in_textual_order(self):
        q = assemble([
            "SELECT",
            PredicateFragment("{} + {}", (1, 2)),
            "FROM t WHERE",
            PredicateFragment("a = {}", ("x",)),
        ])
        assert q.sql == "SELECT :p1 + :p2 FROM t WHERE a = :p3"
        assert q.values == (1, 2, "x")
        assert q.params == {"p1": 1, "p2": 2, "p3": "x"}

    def test_fragment_slot_count_must_match_values(self):
        with pytest.raises(ValueError):
            PredicateFragment("a = {} AND b = {}", (1,))


class TestStandingConditions:
    def test_course_requires_published_and_not_deleted(self):
        q = _bound(_builder("course"))
        assert "is_published = :p1" in q.sql
        assert "deleted_at IS NULL" in q.sql
        assert q.values == (True,)

    def test_product_has_no_deleted_column(self):
        q = _bound(_builder("product"))
        assert "deleted_at" not in q.sql

    def test_event_excludes_elapsed_by_default(self):
        q = _bound(_builder("event"))
        assert "event_date >= :p2" in q.sql
        assert q.values == (True, NOW)

    def test_include_past_drops_elapsed_condition(self):
        q = _bound(_builder("event", include_past=True))
        assert "event_date" not in q.sql

    def test_aware_now_is_normalized_to_naive_utc(self):
        aware = datetime(2026, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        builder = PredicateBuilder(ENTITIES["event"], Locale.EN, SqliteTextSearch(), now=aware)
        assert builder.build().values[-1] == datetime(2026, 6, 1, 12, 0)


class TestFilters:
    def test_price_range_and_level(self):
        b = _builder()
        b.add_filters({"minPrice": 50, "maxPrice": 200, "level": "beginner"})
        q = _bound(b)
        assert "price >= :p2" in q.sql
        assert "price <= :p3" in q.sql
        assert "LOWER(level) = :p4" in q.sql
        assert q.values == (True, 50, 200, "beginner")

    def test_placeholders_are_contiguous_whatever_subset_is_supplied(self):
        subsets = [
            {},
            {"maxPrice": 10},
            {"minPrice": 1, "level": "advanced"},
            {"level": "advanced", "minPrice": None, "maxPrice": 99},
        ]
        for filters in subsets:
            for phrase in (None, "chakra healing"):
                b = _builder()
                b.add_filters(filters)
                b.add_phrase(phrase)
                q = _bound(b)
                numbers = _placeholders(q.sql)
                assert numbers == list(range(1, len(q.values) + 1)), (filters, phrase)

    def test_absent_values_emit_nothing(self):
        b = _builder()
        b.add_filters({"minPrice": None, "maxPrice": "  ", "level": None})
        assert _bound(b).values == (True,)

    def test_emission_follows_declared_order_not_mapping_order(self):
        a, b = _builder(), _builder()
        a.add_filters({"level": "beginner", "maxPrice": 9, "minPrice": 1})
        b.add_filters({"minPrice": 1, "maxPrice": 9, "level": "beginner"})
        assert _bound(a) == _bound(b)

    def test_unknown_filter_rejected(self):
        with pytest.raises(InvalidFilterValue) as exc:
            _builder("product").add_filters({"level": "beginner"})
        assert exc.value.filter_name == "level"

    def test_invalid_enum_fails_before_anything_is_emitted(self):
        b = _builder()
        with pytest.raises(InvalidFilterValue) as exc:
            b.add_filters({"minPrice": 10, "level": "expert"})
        assert exc.value.filter_name == "level"
        assert b.build().values == (True,)

    def test_enum_accepts_member_and_any_case(self):
        b = _builder()
        b.add_filter("level", CourseLevel.ADVANCED)
        c = _builder()
        c.add_filter("level", " Advanced ")
        assert _bound(b).values[-1] == _bound(c).values[-1] == "advanced"

    @pytest.mark.parametrize("bad", ["cheap", -1, float("nan"), True, [5]])
    def test_bad_prices_rejected(self, bad):
        with pytest.raises(InvalidFilterValue):
            _builder().add_filter("minPrice", bad)

    def test_numeric_strings_and_decimals_accepted(self):
        b = _builder()
        b.add_filters({"minPrice": "12.5", "maxPrice": Decimal("40")})
        assert _bound(b).values[1:] == (12.5, 40.0)

    def test_min_above_max_rejected(self):
        with pytest.raises(InvalidFilterValue) as exc:
            _builder().add_filters({"minPrice": 300, "maxPrice": 200})
        assert exc.value.filter_name == "minPrice"

    def test_equal_bounds_allowed(self):
        b = _builder()
        b.add_filters({"minPrice": 20, "maxPrice": 20})
        assert _bound(b).values[1:] == (20, 20)


class TestEventFilters:
    def test_city_is_case_insensitive_substring(self):
        b = _builder("event", include_past=True)
        b.add_filter("city", "Bar")
        q = _bound(b)
        assert "LOWER(venue_city) LIKE :p2 ESCAPE '\\'" in q.sql
        assert q.values[-1] == "%bar%"

    def test_city_wildcards_are_escaped(self):
        b = _builder("event", include_past=True)
        b.add_filter("city", "100%_off")
        assert _bound(b).values[-1] == "%100\\%\\_off%"
        assert escape_like("a\\b") == "a\\\\b"

    def test_date_only_end_covers_whole_day(self):
        b = _builder("event", include_past=True)
        b.add_filters({"startDate": "2026-07-01", "endDate": "2026-07-31"})
        assert _bound(b).values[1:] == (
            datetime(2026, 7, 1, 0, 0),
            datetime(2026, 7, 31, 23, 59, 59, 999999),
        )

    def test_datetime_and_date_objects(self):
        b = _builder("event", include_past=True)
        b.add_filters({
            "startDate": datetime(2026, 7, 1, 10, tzinfo=timezone.utc),
            "endDate": date(2026, 7, 2),
        })
        assert _bound(b).values[1] == datetime(2026, 7, 1, 10)

    def test_bad_date_rejected(self):
        with pytest.raises(InvalidFilterValue):
            _builder("event").add_filter("startDate", "next tuesday")

    def test_start_after_end_rejected(self):
        with pytest.raises(InvalidFilterValue):
            _builder("event").add_filters({"startDate": "2026-08-01", "endDate": "2026-07-01"})

    def test_min_available_spots(self):
        b = _builder("event", include_past=True)
        b.add_filter("minAvailableSpots", 3)
        assert "available_spots >= :p2" in _bound(b).sql


class TestPhrase:
    def test_phrase_is_sanitized_and_bound_once(self):
        b = _builder()
        query = b.add_phrase("  Chakra -- 'Healing';  ")
        assert query == "chakra healing"
        q = _bound(b)
        assert q.values == (True, "chakra healing")
        assert "Healing" not in q.sql

    @pytest.mark.parametrize("phrase", [None, "", "   ", "!!! --"])
    def test_empty_phrase_adds_nothing(self, phrase):
        b = _builder()
        assert b.add_phrase(phrase) == ""
        assert b.query == ""
        assert _bound(b).values == (True,)

    def test_phrase_matches_localized_ranked_fields(self):
        b = _builder(locale=Locale.ES)
        b.add_phrase("meditación")
        sql = _bound(b).sql
        assert "COALESCE(NULLIF(title_es, ''), title)" in sql
        assert "COALESCE(NULLIF(description_es, ''), description)" in sql
        assert "slug" not in sql

    def test_postgres_uses_locale_text_config(self):
        b = _builder(locale=Locale.ES, dialect=PostgresTextSearch())
        b.add_phrase("luna")
        sql = _bound(b).sql
        assert "to_tsvector('spanish'" in sql
        assert "plainto_tsquery('spanish', :p2)" in sql

    def test_query_terms_are_capped(self):
        phrase = " ".join(f"w{i}" for i in range(100))
        assert len(sanitize_query(phrase).split()) == 32
