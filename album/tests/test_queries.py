"""Tests for request parameter parsing."""

import pytest

from album.errors import BadRequest
from album.queries import ImageQuery, ListingQuery, ThumbQuery


class TestListingQuery:

    def test_defaults(self):
        query = ListingQuery.from_params({})

        assert query == ListingQuery(page=1, limit=20, sort_by='name', order='desc')

    def test_explicit_values(self):
        query = ListingQuery.from_params({'page': '3', 'limit': '5', 'sortBy': 'mtime', 'sort': 'asc'})

        assert query == ListingQuery(page=3, limit=5, sort_by='mtime', order='asc')

    @pytest.mark.parametrize('raw,expected', [('abc', 1), ('0', 1), ('-4', 1), ('', 1), ('2', 2)])
    def test_lenient_page(self, raw, expected):
        assert ListingQuery.from_params({'page': raw}).page == expected

    def test_zero_limit_uses_default(self):
        assert ListingQuery.from_params({'limit': '0'}).limit == 20

    def test_unknown_sort_values_fall_back(self):
        query = ListingQuery.from_params({'sortBy': 'size', 'sort': 'sideways'})

        assert query.sort_by == 'name'
        assert query.order == 'desc'


class TestThumbQuery:

    def test_missing_name(self):
        with pytest.raises(BadRequest):
            ThumbQuery.from_params({'w': '100'})

    def test_default_width(self):
        assert ThumbQuery.from_params({'name': 'a.jpg'}).width == 400
        assert ThumbQuery.from_params({'name': 'a.jpg', 'w': ''}).width == 400
        assert ThumbQuery.from_params({'name': 'a.jpg', 'w': '0'}).width == 400

    def test_configured_default_width(self):
        assert ThumbQuery.from_params({'name': 'a.jpg'}, default_width=250).width == 250

    def test_explicit_width(self):
        assert ThumbQuery.from_params({'name': 'a.jpg', 'w': '120'}).width == 120

    def test_invalid_width(self):
        with pytest.raises(BadRequest):
            ThumbQuery.from_params({'name': 'a.jpg', 'w': 'wide'})


class TestImageQuery:

    def test_name(self):
        assert ImageQuery.from_params({'name': 'a.jpg'}).name == 'a.jpg'

    def test_missing_name(self):
        with pytest.raises(BadRequest):
            ImageQuery.from_params({'name': ''})
