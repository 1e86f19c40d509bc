"""Unit tests for belongs_to / has_many relations and inverse handling."""

from __future__ import annotations

import logging

from rdflib import URIRef

from semantic_model.models import SemanticModel
from semantic_model.models import compute_property_diff
from semantic_model.models import default_graph
from semantic_model.models import has_many
from semantic_model.models import rdf_type
from semantic_model.namespaces import RDF
from semantic_model.namespaces import SCHEMA
from semantic_model.store import Statement
from tests.helpers.library import ALICE
from tests.helpers.library import BOOKS_GRAPH
from tests.helpers.library import EX
from tests.helpers.library import OTHER_GRAPH
from tests.helpers.library import Author
from tests.helpers.library import Book

BOOK = URIRef("http://example.org/books#dune")
DIFF_LOGGER = "semantic_model.models.diff"


@rdf_type(EX.Shelf)
@default_graph(OTHER_GRAPH)
class Shelf(SemanticModel):
    items = has_many(model="book", predicate=EX.holds, propagate_default_graph=True)


# ===================================================================
# belongs_to
# ===================================================================


class TestBelongsTo:
    def test_write_and_read(self, store):
        author = store.create("author", ALICE)
        book = store.create("book", BOOK, author=author)
        assert store.match(BOOK, SCHEMA.author) == [
            Statement(BOOK, SCHEMA.author, ALICE, BOOKS_GRAPH)
        ]
        reread = store.create("book", BOOK).author
        assert isinstance(reread, Author)
        assert reread == author
        assert book.author is author

    def test_inverse_collection_follows(self, store):
        author = store.create("author", ALICE)
        book = store.create("book", BOOK)
        assert author.books == []

        book.author = author
        assert author.books == [book]

        book.author = None
        assert author.books == []
        assert store.match(BOOK, SCHEMA.author) == []

    def test_reassignment_replaces_statement(self, store):
        first = store.create("author", ALICE)
        second = store.create("author", "http://example.org/people#bob")
        book = store.create("book", BOOK, author=first)
        assert first.books == [book]

        book.author = second
        assert [st.object for st in store.match(BOOK, SCHEMA.author)] == [second.uri]
        assert first.books == []
        assert second.books == [book]

    def test_uri_coerced_to_entity(self, store):
        book = store.create("book", BOOK)
        book.author = ALICE
        assert isinstance(book.author, Author)
        assert book.author.uri == ALICE
        assert store.match(ALICE, RDF.type, SCHEMA.Person)

    def test_missing_relation_reads_none(self, store):
        assert store.create("book", BOOK).author is None


# ===================================================================
# has_many
# ===================================================================


class TestHasMany:
    def test_write_and_read(self, store):
        dune = store.create("tag")
        classic = store.create("tag")
        store.create("book", BOOK, tags=[dune, classic])
        reread = store.create("book", BOOK).tags
        assert set(reread) == {dune, classic}
        assert len(store.match(BOOK, EX.tag, None, BOOKS_GRAPH)) == 2

    def test_duplicates_collapsed(self, store):
        tag = store.create("tag")
        book = store.create("book", BOOK, tags=[tag, tag])
        assert book.tags == [tag]
        assert len(store.match(BOOK, EX.tag)) == 1

    def test_diff_is_symmetric_difference(self, store):
        a, b, c = (store.create("tag") for _ in range(3))
        book = store.create("book", BOOK, tags=[a, b])

        diff = compute_property_diff(book, "tags", [b, c])
        assert diff.added == [c]
        assert diff.removed == [a]
        assert diff.insert == [Statement(BOOK, EX.tag, c.uri, BOOKS_GRAPH)]
        assert diff.delete == [Statement(BOOK, EX.tag, a.uri, BOOKS_GRAPH)]

    def test_unchanged_member_keeps_statement(self, store):
        a, b, c = (store.create("tag") for _ in range(3))
        book = store.create("book", BOOK, tags=[a, b])
        before = len(store.pending)

        book.tags = [b, c]
        assert {st.object for st in store.match(BOOK, EX.tag)} == {b.uri, c.uri}
        changeset = store.pending[before]
        assert len(changeset.insert) == 1
        assert len(changeset.delete) == 1

    def test_uris_coerced_to_entities(self, store):
        tag = store.create("tag")
        book = store.create("book", BOOK, tags=[tag.uri])
        assert book.tags == [tag]
        assert type(book.tags[0]).__name__ == "Tag"

    def test_cached_clear_does_not_warn(self, store, caplog):
        tag = store.create("tag")
        book = store.create("book", BOOK, tags=[tag])
        with caplog.at_level(logging.WARNING, logger=DIFF_LOGGER):
            book.tags = []
        assert "Bulk clear" not in caplog.text
        assert store.match(BOOK, EX.tag) == []

    def test_uncached_clear_warns_and_keeps_other_graphs(self, store, caplog):
        a, b = store.create("tag"), store.create("tag")
        store.create("book", BOOK, tags=[a, b])
        elsewhere = Statement(BOOK, EX.tag, URIRef("http://example.org/tags#x"), OTHER_GRAPH)
        store.add_all([elsewhere])

        fresh = store.create("book", BOOK)
        with caplog.at_level(logging.WARNING, logger=DIFF_LOGGER):
            fresh.tags = []

        assert "Bulk clear of uncached relation tags" in caplog.text
        assert store.match(BOOK, EX.tag) == [elsewhere]
        assert fresh.tags == []

    def test_propagates_default_graph(self, store):
        store.register_model("shelf", Shelf)
        shelf = store.create("shelf", "http://example.org/shelves#1")
        shelf.items = [BOOK]
        assert shelf.items[0].default_graph == OTHER_GRAPH
        assert store.match(BOOK, RDF.type, SCHEMA.Book, OTHER_GRAPH)


# ===================================================================
# Inverse has_many
# ===================================================================


class TestInverseHasMany:
    def test_write_creates_statement_with_member_as_subject(self, store):
        author = store.create("author", ALICE)
        book = store.create("book", BOOK)
        author.books = [book]
        assert store.match(None, SCHEMA.author, ALICE) == [
            Statement(BOOK, SCHEMA.author, ALICE, BOOKS_GRAPH)
        ]
        assert book.author == author

    def test_uses_registered_type_graph(self, store):
        store.register_type_location(SCHEMA.Book, OTHER_GRAPH)
        author = store.create("author", ALICE)
        book = store.create("book", BOOK)
        author.books = [book]
        assert store.match(BOOK, SCHEMA.author, ALICE, OTHER_GRAPH)

    def test_removal_invalidates_member(self, store):
        author = store.create("author", ALICE)
        book = store.create("book", BOOK)
        author.books = [book]
        assert book.author == author

        author.books = []
        assert store.match(None, SCHEMA.author, ALICE) == []
        assert book.author is None

    def test_read_returns_books(self, store):
        author = store.create("author", ALICE)
        store.create("book", BOOK, author=author)
        store.create("book", "http://example.org/books#emma", author=author)
        uris = {book.uri for book in store.create("author", ALICE).books}
        assert uris == {BOOK, URIRef("http://example.org/books#emma")}
        assert all(isinstance(book, Book) for book in store.create("author", ALICE).books)
