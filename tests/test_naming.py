"""Tests for the naming module."""

import re

from openapi_mcp_generator.naming import build_tool_name, choose_tool_name, slugify, unique_name

_VALID_NAME = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class TestBuildToolName:
    """Test tool name synthesis from HTTP method + path."""

    def test_path_parameter(self):
        assert build_tool_name("GET", "/items/{id}") == "getItemsById"

    def test_collection(self):
        assert build_tool_name("post", "/items") == "postItems"

    def test_nested_parameters(self):
        assert build_tool_name("delete", "/stores/{storeId}/orders") == "deleteStoresByStoreIdOrders"

    def test_separators_become_words(self):
        assert build_tool_name("get", "/user-profiles/{user_id}") == "getUserProfilesByUserId"

    def test_root(self):
        assert build_tool_name("get", "/") == "getRoot"

    def test_long_paths_truncated(self):
        name = build_tool_name("get", "/" + "/".join(["segment"] * 20))
        assert len(name) == 64
        assert _VALID_NAME.match(name)


class TestSlugify:
    """Test operationId sanitization."""

    def test_clean_id_unchanged(self):
        assert slugify("listPets") == "listPets"

    def test_invalid_characters_replaced(self):
        assert slugify("pets.list v2") == "pets_list_v2"

    def test_runs_collapsed_and_trimmed(self):
        assert slugify("__pets//list__") == "pets_list"

    def test_nothing_usable(self):
        assert slugify("!!!") == ""

    def test_hyphens_kept(self):
        assert slugify("get-pet") == "get-pet"


class TestChooseToolName:
    """Test operationId preference and deterministic suffixing."""

    def test_prefers_operation_id(self):
        assert choose_tool_name("get", "/pets", "listPets", set()) == "listPets"

    def test_taken_operation_id_falls_back_to_path(self):
        assert choose_tool_name("get", "/pets", "listPets", {"listPets"}) == "getPets"

    def test_suffixes_in_order(self):
        taken = {"getPets"}
        first = choose_tool_name("get", "/pets", None, taken)
        taken.add(first)
        second = choose_tool_name("get", "/pets", None, taken)
        assert (first, second) == ("getPets_2", "getPets_3")

    def test_unusable_operation_id_ignored(self):
        assert choose_tool_name("get", "/pets", "???", set()) == "getPets"


class TestUniqueName:

    def test_free_name_returned(self):
        assert unique_name("a", set()) == "a"

    def test_suffix_respects_length_limit(self):
        base = "x" * 64
        name = unique_name(base, {base})
        assert name.endswith("_2")
        assert len(name) == 64
