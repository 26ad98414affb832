"""InMemoryDocumentStore tests: filter evaluation, stages and fixture loading."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from marketplace_search.adapters.fixtures import FixtureError, load_fixtures, parse_dates
from marketplace_search.adapters.memory_store import (
    InMemoryDocumentStore,
    matches,
    matches_condition,
    resolve_path,
    sort_documents,
)
from marketplace_search.domain.filters import DocumentFilter, FieldFilter, FilterOp
from marketplace_search.domain.geo import GeoCircle
from marketplace_search.domain.query_plan import (
    Collection,
    LimitStage,
    LookupStage,
    MatchStage,
    SkipStage,
    SortKey,
    SortStage,
)

SAMPLE_FIXTURES = Path(__file__).resolve().parent.parent / "data" / "sample_marketplace.json"


def _cond(field, op, value=None):
    return FieldFilter(field=field, op=op, value=value)


class TestResolvePath:
    def test_nested_dicts(self):
        assert resolve_path({"rating": {"average": 4}}, "rating.average") == [4]

    def test_arrays_are_traversed(self):
        doc = {"profile": {"languages": [{"language": "English"}, {"language": "Korean"}]}}
        assert resolve_path(doc, "profile.languages.language") == ["English", "Korean"]

    def test_missing(self):
        assert resolve_path({"a": 1}, "b.c") == []

    def test_positional(self):
        assert resolve_path({"portfolio": [{"t": 1}]}, "portfolio.0") == [{"t": 1}]


class TestMatchesCondition:
    """Mongo reading of each operator over dotted paths and arrays."""

    def test_equals_matches_array_element(self):
        assert matches_condition({"tags": ["a", "b"]}, _cond("tags", FilterOp.equals, "b"))

    def test_not_equals_matches_missing_field(self):
        assert matches_condition({}, _cond("isHidden", FilterOp.not_equals, True))
        assert matches_condition({"isHidden": False}, _cond("isHidden", FilterOp.not_equals, True))
        assert not matches_condition({"isHidden": True}, _cond("isHidden", FilterOp.not_equals, True))

    def test_any_and_all(self):
        doc = {"tags": ["a", "b"]}
        assert matches_condition(doc, _cond("tags", FilterOp.any_of, ["b", "z"]))
        assert not matches_condition(doc, _cond("tags", FilterOp.any_of, ["z"]))
        assert matches_condition(doc, _cond("tags", FilterOp.all_of, ["a", "b"]))
        assert not matches_condition(doc, _cond("tags", FilterOp.all_of, ["a", "z"]))

    def test_ranges_ignore_other_types(self):
        assert matches_condition({"views": 10}, _cond("views", FilterOp.gte, 10))
        assert not matches_condition({"views": "10"}, _cond("views", FilterOp.gte, 1))
        assert not matches_condition({}, _cond("views", FilterOp.lte, 1))

    def test_dates_compare(self):
        doc = parse_dates({"createdAt": "2024-01-02T00:00:00Z"})
        cutoff = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert matches_condition(doc, _cond("createdAt", FilterOp.gte, cutoff))

    def test_contains_case_insensitive(self):
        assert matches_condition({"title": "Guitar Lessons"}, _cond("title", FilterOp.contains, "guitar"))
        assert not matches_condition({"title": None}, _cond("title", FilterOp.contains, "guitar"))

    def test_contains_is_literal(self):
        assert not matches_condition({"title": "abc"}, _cond("title", FilterOp.contains, "a.c"))
        assert matches_condition({"title": "a.c"}, _cond("title", FilterOp.contains, "a.c"))

    def test_iequals_any_whole_value(self):
        doc = {"languages": [{"language": "English"}]}
        assert matches_condition(doc, _cond("languages.language", FilterOp.iequals_any, ["ENGLISH"]))
        assert not matches_condition(doc, _cond("languages.language", FilterOp.iequals_any, ["Eng"]))

    def test_portfolio_presence(self):
        full = {"profile": {"portfolio": [{"title": "x"}]}}
        empty = {"profile": {"portfolio": []}}
        assert matches_condition(full, _cond("profile.portfolio", FilterOp.non_empty))
        assert not matches_condition(empty, _cond("profile.portfolio", FilterOp.non_empty))
        assert matches_condition(empty, _cond("profile.portfolio", FilterOp.empty))
        assert matches_condition({}, _cond("profile.portfolio", FilterOp.empty))
        assert matches_condition({"profile": {"portfolio": None}}, _cond("profile.portfolio", FilterOp.empty))
        assert not matches_condition(full, _cond("profile.portfolio", FilterOp.empty))

    def test_geo_within(self):
        circle = GeoCircle(longitude=0, latitude=0, radius_m=1_000)
        near = {"coordinates": {"type": "Point", "coordinates": [0.001, 0.001]}}
        far = {"coordinates": {"type": "Point", "coordinates": [1, 1]}}
        assert matches_condition(near, _cond("coordinates", FilterOp.geo_within, circle))
        assert not matches_condition(far, _cond("coordinates", FilterOp.geo_within, circle))
        assert not matches_condition({}, _cond("coordinates", FilterOp.geo_within, circle))


class TestMatches:
    def test_should_requires_one(self):
        df = DocumentFilter(should=[_cond("title", FilterOp.contains, "x"), _cond("location", FilterOp.contains, "x")])
        assert matches({"title": "a", "location": "box"}, df)
        assert not matches({"title": "a", "location": "b"}, df)

    def test_empty_filter_matches_all(self):
        assert matches({}, DocumentFilter())


class TestSortDocuments:
    def test_multi_key_stable(self):
        docs = [{"_id": "b", "v": 1}, {"_id": "a", "v": 1}, {"_id": "c", "v": 2}]
        keys = [SortKey(field="v", descending=True), SortKey(field="_id")]
        assert [d["_id"] for d in sort_documents(docs, keys)] == ["c", "a", "b"]

    def test_missing_values_sort_first_ascending(self):
        docs = [{"_id": "a", "v": 3}, {"_id": "b"}]
        assert [d["_id"] for d in sort_documents(docs, [SortKey(field="v")])] == ["b", "a"]


class TestStages:
    def _store(self):
        return InMemoryDocumentStore({
            "advertisements": [
                {"_id": "1", "profileId": "p1", "tags": ["t1", "t2"], "createdAt": "2024-01-01T00:00:00Z"},
                {"_id": "2", "profileId": "missing", "tags": [], "createdAt": "2024-01-02T00:00:00Z"},
                {"_id": "3", "tags": ["t2"], "createdAt": "2024-01-03T00:00:00Z"},
            ],
            "profiles": [{"_id": "p1", "user": "u1", "portfolio": []}],
            "tags": [{"_id": "t1", "name": "one"}, {"_id": "t2", "name": "two"}],
        })

    def test_dates_parsed_on_load(self):
        rows = self._store().aggregate([])
        assert isinstance(rows[0]["createdAt"], datetime)

    def test_lookup_unwind_keeps_unmatched_rows(self):
        lookup = LookupStage(source=Collection.profiles, local_field="profileId", as_field="profile")
        rows = {r["_id"]: r for r in self._store().aggregate([lookup])}
        assert rows["1"]["profile"]["_id"] == "p1"
        assert "profile" not in rows["2"]
        assert "profile" not in rows["3"]

    def test_lookup_without_unwind_gives_list(self):
        lookup = LookupStage(source=Collection.tags, local_field="tags", as_field="tagDocs", unwind=False)
        rows = {r["_id"]: r for r in self._store().aggregate([lookup])}
        assert {t["_id"] for t in rows["1"]["tagDocs"]} == {"t1", "t2"}
        assert rows["2"]["tagDocs"] == []

    def test_sort_skip_limit(self):
        stages = [
            SortStage(keys=[SortKey(field="createdAt", descending=True)]),
            SkipStage(count=1),
            LimitStage(count=1),
        ]
        assert [r["_id"] for r in self._store().aggregate(stages)] == ["2"]

    def test_count_aggregate(self):
        match = MatchStage(filter=DocumentFilter(must=[_cond("tags", FilterOp.any_of, ["t2"])]))
        assert self._store().count_aggregate([match]) == 2

    def test_find_and_count(self):
        store = self._store()
        df = DocumentFilter(must=[_cond("tags", FilterOp.any_of, ["t2"])])
        rows = store.find(df, [SortKey(field="_id")], skip=0, limit=1)
        assert [r["_id"] for r in rows] == ["1"]
        assert store.count(df) == 2

    def test_results_are_copies(self):
        store = self._store()
        store.find(DocumentFilter(), [], 0, 10)[0]["tags"].append("mutated")
        assert store.count(DocumentFilter(must=[_cond("tags", FilterOp.equals, "mutated")])) == 0


class TestReferenceReads:
    def test_by_ids_and_parent(self):
        store = InMemoryDocumentStore({
            "categories": [
                {"_id": "root", "name": "Root", "parentId": None},
                {"_id": "child", "name": "Child", "parentId": "root"},
            ],
        })
        assert [c["_id"] for c in store.categories_by_parent(["root"])] == ["child"]
        assert [c["_id"] for c in store.categories_by_ids(["root", "nope"])] == ["root"]
        assert store.users_by_ids([]) == []

    def test_insert(self):
        store = InMemoryDocumentStore()
        store.insert("tags", {"_id": "t9", "name": "nine"})
        assert store.tags_by_ids(["t9"]) == [{"_id": "t9", "name": "nine"}]


class TestFixtures:
    def test_sample_file_loads(self):
        fixtures = load_fixtures(SAMPLE_FIXTURES)
        assert fixtures[Collection.advertisements]
        assert fixtures[Collection.profiles]
        created = fixtures[Collection.advertisements][0]["createdAt"]
        assert isinstance(created, datetime) and created.tzinfo is not None

    def test_store_from_sample_file(self):
        store = InMemoryDocumentStore.from_file(SAMPLE_FIXTURES)
        assert store.ping() is True
        assert store.count(DocumentFilter()) == len(load_fixtures(SAMPLE_FIXTURES)[Collection.advertisements])

    def test_search_vector_built_when_missing(self, tmp_path):
        path = tmp_path / "f.json"
        path.write_text(json.dumps({
            "tags": [{"_id": "t1", "name": "vintage"}],
            "advertisements": [{
                "_id": "a1", "title": "Record player", "description": "Works well",
                "ownerId": "u1", "categoryId": "c1", "type": "goods", "tags": ["t1"],
            }],
        }))
        (ad,) = load_fixtures(path)[Collection.advertisements]
        assert ad["searchVector"] == "Record player Works well vintage"

        store = InMemoryDocumentStore.from_file(path)
        df = DocumentFilter(should=[_cond("searchVector", FilterOp.contains, "VINTAGE")])
        assert store.count(df) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FixtureError):
            load_fixtures(tmp_path / "nope.json")

    def test_unknown_collection(self, tmp_path):
        path = tmp_path / "f.json"
        path.write_text(json.dumps({"widgets": []}))
        with pytest.raises(FixtureError, match="unknown collection"):
            load_fixtures(path)

    def test_invalid_record(self, tmp_path):
        path = tmp_path / "f.json"
        path.write_text(json.dumps({"advertisements": [{"_id": "x", "title": "no owner"}]}))
        with pytest.raises(FixtureError, match="index 0"):
            load_fixtures(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "f.json"
        path.write_text("{not json")
        with pytest.raises(FixtureError):
            load_fixtures(path)
