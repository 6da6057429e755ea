"""Tests for apinav.generator.navigation."""

from __future__ import annotations

import logging

import pytest

from apinav.exceptions import SlugCollisionError
from apinav.models import (
    CollisionPolicy,
    Endpoint,
    HTTPMethod,
    NavigationGroup,
    ParserConfig,
    TagInfo,
)
from apinav.generator.navigation import (
    assign_navigation_paths,
    endpoint_slug,
    format_tag_name,
    generate_navigation,
    navigation_path,
    slugify,
)


def _endpoint(
    path: str,
    method: HTTPMethod = HTTPMethod.GET,
    tag: str = "default",
    operation_id: str | None = None,
) -> Endpoint:
    return Endpoint(
        title=operation_id or f"{method.value} {path}",
        method=method,
        path=path,
        tags=[tag],
        operation_id=operation_id,
    )


# ---------------------------------------------------------------------------
# Slugs
# ---------------------------------------------------------------------------


class TestSlugify:
    """slugify() output alphabet and idempotence."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("listPets", "listpets"),
            ("GET_/users/{id}", "get_users_id"),
            ("POST_/a/{b}/c", "post_a_b_c"),
            ("get-thing", "get-thing"),
            ("  spaced out  ", "spaced_out"),
            ("__lead__trail__", "lead_trail"),
            ("Ünïcödé op", "n_c_d_op"),
            ("a.b:c", "a_b_c"),
        ],
    )
    def test_examples(self, text: str, expected: str) -> None:
        assert slugify(text) == expected

    @pytest.mark.parametrize("text", ["GET_/users/{id}", "Weird!!Name", "x__y", "user-accounts"])
    def test_idempotent(self, text: str) -> None:
        once = slugify(text)
        assert slugify(once) == once

    def test_output_alphabet(self) -> None:
        slug = slugify("DELETE_/v1/{org}/members/{member-id}.json?x=1")
        assert set(slug) <= set("abcdefghijklmnopqrstuvwxyz0123456789_-")
        assert not slug.startswith("_")
        assert not slug.endswith("_")


class TestFormatTagName:
    """Group titles derived from tag names."""

    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("pets", "Pets"),
            ("user-accounts", "User Accounts"),
            ("order_items", "Order Items"),
            ("Already Title", "Already Title"),
        ],
    )
    def test_examples(self, tag: str, expected: str) -> None:
        assert format_tag_name(tag) == expected


class TestNavigationPath:
    """Page path composition."""

    def test_uses_operation_id(self) -> None:
        endpoint = _endpoint("/users/{id}", tag="User Accounts", operation_id="getUser")
        assert endpoint_slug(endpoint) == "getuser"
        assert navigation_path("User Accounts", endpoint) == "/api_reference/user_accounts/getuser"

    def test_falls_back_to_method_and_path(self) -> None:
        endpoint = _endpoint("/users/{id}", method=HTTPMethod.PATCH)
        assert endpoint_slug(endpoint) == "patch_users_id"

    def test_custom_prefix(self) -> None:
        endpoint = _endpoint("/ping", operation_id="ping")
        assert navigation_path("misc", endpoint, prefix="/docs") == "/docs/misc/ping"


# ---------------------------------------------------------------------------
# Collision policy
# ---------------------------------------------------------------------------


class TestAssignNavigationPaths:
    """Duplicate page paths under each CollisionPolicy."""

    @pytest.fixture
    def colliding(self) -> list[Endpoint]:
        return [
            _endpoint("/a", tag="things", operation_id="listThings"),
            _endpoint("/b", tag="things", operation_id="ListThings"),
            _endpoint("/c", tag="things", operation_id="LISTTHINGS"),
        ]

    def test_no_collision(self) -> None:
        endpoints = [_endpoint("/a", operation_id="a"), _endpoint("/b", operation_id="b")]
        assert assign_navigation_paths(endpoints) == [
            "/api_reference/default/a",
            "/api_reference/default/b",
        ]

    def test_warn_keeps_paths_and_logs(
        self, colliding: list[Endpoint], caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="apinav"):
            paths = assign_navigation_paths(colliding)

        assert paths == ["/api_reference/things/listthings"] * 3
        assert "GET /a" in caplog.text
        assert "GET /c" in caplog.text

    def test_error_raises(self, colliding: list[Endpoint]) -> None:
        config = ParserConfig(collision_policy=CollisionPolicy.ERROR)

        with pytest.raises(SlugCollisionError) as exc_info:
            assign_navigation_paths(colliding, config)

        assert exc_info.value.path == "/api_reference/things/listthings"
        assert exc_info.value.endpoints == ["GET /a", "GET /b", "GET /c"]
        assert exc_info.value.exit_code == 8

    def test_suffix_in_document_order(self, colliding: list[Endpoint]) -> None:
        config = ParserConfig(collision_policy=CollisionPolicy.SUFFIX)
        assert assign_navigation_paths(colliding, config) == [
            "/api_reference/things/listthings",
            "/api_reference/things/listthings_2",
            "/api_reference/things/listthings_3",
        ]

    def test_suffix_skips_paths_already_taken(self) -> None:
        endpoints = [
            _endpoint("/a", tag="t", operation_id="dup"),
            _endpoint("/b", tag="t", operation_id="dup_2"),
            _endpoint("/c", tag="t", operation_id="DUP"),
        ]
        config = ParserConfig(collision_policy=CollisionPolicy.SUFFIX)

        paths = assign_navigation_paths(endpoints, config)

        assert paths == [
            "/api_reference/t/dup",
            "/api_reference/t/dup_2",
            "/api_reference/t/dup_3",
        ]
        assert len(set(paths)) == len(paths)

    def test_same_slug_in_different_groups_is_not_a_collision(self) -> None:
        endpoints = [
            _endpoint("/a", tag="one", operation_id="list"),
            _endpoint("/b", tag="two", operation_id="list"),
        ]
        config = ParserConfig(collision_policy=CollisionPolicy.ERROR)
        assert assign_navigation_paths(endpoints, config) == [
            "/api_reference/one/list",
            "/api_reference/two/list",
        ]


# ---------------------------------------------------------------------------
# Tree building
# ---------------------------------------------------------------------------


class TestGenerateNavigation:
    """Grouping and ordering of the navigation tree."""

    def test_groups_by_first_tag(self) -> None:
        endpoints = [
            _endpoint("/a", tag="alpha", operation_id="a1"),
            _endpoint("/b", tag="beta", operation_id="b1"),
            _endpoint("/c", tag="alpha", operation_id="a2"),
        ]

        navigation = generate_navigation(endpoints, [])

        assert [g.title for g in navigation] == ["Alpha", "Beta"]
        assert [p.title for p in navigation[0].children] == ["a1", "a2"]
        assert all(isinstance(g, NavigationGroup) for g in navigation)

    def test_declared_tag_order_wins(self) -> None:
        endpoints = [
            _endpoint("/a", tag="zeta", operation_id="z"),
            _endpoint("/b", tag="alpha", operation_id="a"),
            _endpoint("/c", tag="undeclared", operation_id="u"),
            _endpoint("/d", tag="also-undeclared", operation_id="au"),
        ]
        declared = [TagInfo(name="zeta"), TagInfo(name="alpha")]

        navigation = generate_navigation(endpoints, declared)

        assert [g.title for g in navigation] == ["Zeta", "Alpha", "Also Undeclared", "Undeclared"]

    def test_declared_tags_without_endpoints_are_omitted(self) -> None:
        endpoints = [_endpoint("/a", tag="used", operation_id="a")]
        navigation = generate_navigation(endpoints, [TagInfo(name="unused"), TagInfo(name="used")])
        assert [g.title for g in navigation] == ["Used"]

    def test_pages_carry_method_and_path(self) -> None:
        endpoints = [_endpoint("/items", method=HTTPMethod.POST, tag="items", operation_id="createItem")]

        page = generate_navigation(endpoints, [])[0].children[0]

        assert page.type == "page"
        assert page.method is HTTPMethod.POST
        assert page.path == "/api_reference/items/createitem"

    def test_every_endpoint_appears_once(self, petstore_30_parsed) -> None:
        navigation = generate_navigation(petstore_30_parsed.endpoints, petstore_30_parsed.tags)
        pages = [page for group in navigation for page in group.children]
        assert len(pages) == len(petstore_30_parsed.endpoints)

    def test_empty(self) -> None:
        assert generate_navigation([], [TagInfo(name="x")]) == []
