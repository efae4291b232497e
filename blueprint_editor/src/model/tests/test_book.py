"""Tests for model/book.py - page order and active page clamping."""

from blueprint_editor.src.model.blueprint import Blueprint
from blueprint_editor.src.model.book import Book


def make_book(catalog, pages=2, **kwargs):
    return Book([Blueprint(catalog, name=f"Page {i}") for i in range(pages)], **kwargs)


class TestActiveIndex:
    def test_default_active_is_first_page(self, catalog):
        book = make_book(catalog)
        assert book.active_index == 0
        assert book.get_blueprint().name == "Page 0"

    def test_out_of_range_is_clamped_and_becomes_active(self, catalog):
        book = make_book(catalog)
        assert book.get_blueprint(99).name == "Page 1"
        assert book.active_index == 1

    def test_negative_index_clamps_to_first(self, catalog):
        book = make_book(catalog, active_index=1)
        assert book.get_blueprint(-3).name == "Page 0"
        assert book.active_index == 0

    def test_constructor_clamps(self, catalog):
        assert make_book(catalog, pages=3, active_index=10).active_index == 2

    def test_empty_book(self):
        book = Book()
        assert book.active_index is None
        assert book.get_blueprint() is None
        assert book.get_blueprint(3) is None
        assert book.is_empty()


class TestPages:
    def test_append_activates_first_page_of_empty_book(self, catalog):
        book = Book(name="Mine")
        assert book.append(Blueprint(catalog)) == 0
        assert book.active_index == 0
        assert book.name == "Mine"

    def test_is_empty_checks_every_page(self, catalog):
        book = make_book(catalog)
        assert book.is_empty()
        book[1].add_entity("pipe", (0.5, 0.5))
        assert not book.is_empty()

    def test_iteration_and_length(self, catalog):
        book = make_book(catalog, pages=3)
        assert len(book) == 3
        assert [page.name for page in book] == ["Page 0", "Page 1", "Page 2"]
