"""
Unit tests for the ownership/membership predicates in backend/authz.py.

Run: pytest backend/test_authz.py -v
"""

import itertools

import pytest

from backend.authz import (
    can_mutate_project,
    is_authorized,
    require_project_access,
    require_project_owner,
)
from backend.errors import NotFoundError, UnauthorizedError


USERS = ["u-owner", "u-member", "u-other", "u-member-2"]

PROJECTS = [
    {"id": "p1", "owner_id": "u-owner", "members": []},
    {"id": "p2", "owner_id": "u-owner", "members": ["u-member"]},
    {"id": "p3", "owner_id": "u-other", "members": ["u-member", "u-member-2"]},
    # Owner listed as a member as well must not change anything
    {"id": "p4", "owner_id": "u-owner", "members": ["u-owner", "u-member-2"]},
]


@pytest.mark.parametrize("user_id,project", list(itertools.product(USERS, PROJECTS)))
def test_is_authorized_iff_owner_or_member(user_id, project):
    expected = project["owner_id"] == user_id or user_id in project["members"]
    assert is_authorized(user_id, project) is expected


@pytest.mark.parametrize("user_id,project", list(itertools.product(USERS, PROJECTS)))
def test_can_mutate_only_owner(user_id, project):
    assert can_mutate_project(user_id, project) is (project["owner_id"] == user_id)


def test_missing_project_or_user_is_never_authorized():
    assert is_authorized("u-owner", None) is False
    assert can_mutate_project("u-owner", None) is False
    assert is_authorized("", PROJECTS[0]) is False
    assert is_authorized(None, PROJECTS[0]) is False


def test_missing_members_key_treated_as_empty():
    project = {"id": "p", "owner_id": "u-owner"}
    assert is_authorized("u-owner", project) is True
    assert is_authorized("u-member", project) is False


def test_require_access_returns_project():
    assert require_project_access("u-member", PROJECTS[1]) is PROJECTS[1]


def test_require_access_not_found_before_unauthorized():
    with pytest.raises(NotFoundError):
        require_project_access("u-other", None)
    with pytest.raises(NotFoundError):
        require_project_owner("u-other", None)


def test_require_access_unauthorized_for_outsider():
    with pytest.raises(UnauthorizedError) as exc:
        require_project_access("u-other", PROJECTS[1])
    assert exc.value.message == "Not authorized"


def test_require_owner_rejects_member():
    with pytest.raises(UnauthorizedError):
        require_project_owner("u-member", PROJECTS[1])
    assert require_project_owner("u-owner", PROJECTS[1]) is PROJECTS[1]


def test_predicates_do_not_mutate_project():
    project = {"id": "p", "owner_id": "u-owner", "members": ["u-member"]}
    snapshot = {"id": "p", "owner_id": "u-owner", "members": ["u-member"]}
    is_authorized("u-member", project)
    can_mutate_project("u-member", project)
    assert project == snapshot
