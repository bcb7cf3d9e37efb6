from types import SimpleNamespace

import pytest

from .helpers import BooksTestMixin


def _books(name, username):
    business, year, groups, types, accounts, user = BooksTestMixin().make_books(
        name=name, username=username)
    return SimpleNamespace(business=business, year=year, groups=groups,
                           types=types, user=user, **accounts)


@pytest.fixture
def books(db):
    """Business A with default chart, FY 2025 and an accountant member"""
    return _books("Company A", "alice")


@pytest.fixture
def other_books(db):
    return _books("Company B", "bob")


@pytest.fixture
def alice_client(client, books):
    """Client logged in as the accountant of business A"""
    books.user.default_business = books.business
    books.user.save()
    client.force_login(books.user)
    return client
