"""
Test the in-memory search backend.

What this tests:
---------------
1. Document storage and id assignment
2. Query DSL subset (match_all, term, terms, ids, exists, range, bool)
3. Sorting, including missing values
4. Cursor paging and handle lifecycle

Why this matters:
----------------
- Tests and local tooling run full exports against this backend
- Range and sort semantics must agree with the search cluster
"""

import pytest

from async_search_export.backends.base import Record
from async_search_export.backends.memory import (
    _MISSING,
    InMemoryBackend,
    lookup,
    matches,
    sort_records,
)
from async_search_export.exceptions import BackendError


@pytest.fixture
def backend():
    backend = InMemoryBackend()
    for i in range(10):
        backend.index_document(
            "dataset",
            {"aaa": f"test {i}", "bbb": i, "eee": {"ggg": i, "tag": "even" if i % 2 == 0 else "odd"}},
            doc_type="item",
        )
    return backend


async def fetch_all(backend, index, query=None, sort=None, batch_size=3, doc_type=None):
    handle = await backend.open_cursor(index, query, sort, batch_size, doc_type)
    found = []
    more = True
    while more:
        batch, more = await backend.fetch_next(handle)
        found.extend(batch)
    await backend.release(handle)
    return found


def ids(found):
    return [record.id for record in found]


class TestStorage:
    def test_sequential_ids(self):
        backend = InMemoryBackend()

        first = backend.index_document("i", {"a": 1})
        second = backend.index_document("i", {"a": 2})
        explicit = backend.index_document("i", {"a": 3}, doc_id=99)

        assert (first.id, second.id, explicit.id) == ("1", "2", "99")

    def test_lookup_dotted_path(self):
        source = {"eee": {"ggg": 5}, "x.y": 1}

        assert lookup(source, "eee.ggg") == 5
        assert lookup(source, "x.y") == 1
        assert lookup(source, "eee.missing") is _MISSING


class TestQueries:
    @pytest.mark.asyncio
    async def test_match_all_in_insertion_order(self, backend):
        found = await fetch_all(backend, "dataset")

        assert ids(found) == [str(i) for i in range(1, 11)]

    @pytest.mark.asyncio
    async def test_range_with_string_bounds(self, backend):
        """
        Test range bounds given as strings against numeric fields.

        What this tests:
        ---------------
        1. "from"/"to" inclusive by default
        2. "3" compares numerically with 3

        Why this matters:
        ----------------
        - Legacy clients send numeric bounds as strings
        """
        query = {
            "bool": {
                "must": [{"range": {"bbb": {"from": "3", "to": "5"}}}],
                "must_not": [],
                "should": [],
            }
        }

        found = await fetch_all(backend, "dataset", query)

        assert [r.source["bbb"] for r in found] == [3, 4, 5]

    @pytest.mark.asyncio
    async def test_range_exclusive_bounds(self, backend):
        query = {"range": {"eee.ggg": {"gt": 2, "lt": 5}}}

        found = await fetch_all(backend, "dataset", query)

        assert [r.source["bbb"] for r in found] == [3, 4]

    @pytest.mark.asyncio
    async def test_term_terms_ids_exists(self, backend):
        term = await fetch_all(backend, "dataset", {"term": {"eee.tag": "odd"}})
        terms = await fetch_all(backend, "dataset", {"terms": {"bbb": [1, 2]}})
        by_id = await fetch_all(backend, "dataset", {"ids": {"values": [1, "10"]}})
        exists = await fetch_all(backend, "dataset", {"exists": {"field": "missing"}})

        assert len(term) == 5
        assert [r.source["bbb"] for r in terms] == [1, 2]
        assert ids(by_id) == ["1", "10"]
        assert exists == []

    @pytest.mark.asyncio
    async def test_bool_must_not_and_should(self, backend):
        query = {
            "bool": {
                "should": [{"term": {"bbb": 1}}, {"term": {"bbb": 2}}, {"term": {"bbb": 3}}],
                "must_not": [{"term": {"bbb": 2}}],
            }
        }

        found = await fetch_all(backend, "dataset", query)

        assert [r.source["bbb"] for r in found] == [1, 3]

    def test_unsupported_clause(self):
        with pytest.raises(BackendError):
            matches({"query_string": {"query": "x"}}, Record(id="1", source={}))

    @pytest.mark.asyncio
    async def test_unknown_index(self, backend):
        with pytest.raises(BackendError) as exc_info:
            await backend.open_cursor("nope", None, None, 10)

        assert "nope" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_doc_type_filter(self, backend):
        backend.index_document("dataset", {"bbb": 100}, doc_type="other")

        items = await fetch_all(backend, "dataset", doc_type="item")
        everything = await fetch_all(backend, "dataset")

        assert len(items) == 10
        assert len(everything) == 11


class TestSorting:
    def test_ascending_and_descending(self):
        records = [Record(id=str(i), source={"n": n}) for i, n in enumerate([3, 1, 2])]

        assert [r.source["n"] for r in sort_records(records, ["n"])] == [1, 2, 3]
        assert [r.source["n"] for r in sort_records(records, [{"n": "desc"}])] == [3, 2, 1]
        assert [r.source["n"] for r in sort_records(records, [{"n": {"order": "desc"}}])] == [
            3,
            2,
            1,
        ]

    def test_missing_values_sort_last(self):
        records = [
            Record(id="a", source={}),
            Record(id="b", source={"n": 2}),
            Record(id="c", source={"n": 1}),
        ]

        assert ids(sort_records(records, ["n"])) == ["c", "b", "a"]
        assert ids(sort_records(records, [{"n": "desc"}])) == ["b", "c", "a"]

    def test_doc_order_keeps_insertion_order(self):
        records = [Record(id="b", source={}), Record(id="a", source={})]

        assert ids(sort_records(records, ["_doc"])) == ["b", "a"]

    def test_incomparable_values(self):
        records = [Record(id="a", source={"n": 1}), Record(id="b", source={"n": "x"})]

        with pytest.raises(BackendError):
            sort_records(records, ["n"])


class TestCursorHandles:
    @pytest.mark.asyncio
    async def test_paging(self, backend):
        handle = await backend.open_cursor("dataset", None, None, 4)

        first, more_first = await backend.fetch_next(handle)
        second, more_second = await backend.fetch_next(handle)
        third, more_third = await backend.fetch_next(handle)

        assert (len(first), more_first) == (4, True)
        assert (len(second), more_second) == (4, True)
        assert (len(third), more_third) == (2, False)

    @pytest.mark.asyncio
    async def test_handle_lifecycle(self, backend):
        handle = await backend.open_cursor("dataset", None, None, 4)
        assert backend.open_cursors == 1

        await backend.release(handle)

        assert backend.open_cursors == 0
        assert backend.released_count == 1
        with pytest.raises(BackendError):
            await backend.fetch_next(handle)
        with pytest.raises(BackendError):
            await backend.release(handle)
