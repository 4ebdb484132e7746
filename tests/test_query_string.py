from __future__ import annotations

import pytest

from adapters.query_string import (
    FieldsEncodingError,
    build_query_string,
    build_request_url,
    flatten_params,
)
from conftest import make_descriptor

BASE = "https://api.example.org"


def test_flatten_nested_params_like_jquery():
    pairs = flatten_params(
        {
            "a": {"b": 1},
            "ids": [1, 2],
            "flag": True,
            "none": None,
            "objs": [{"k": "v"}],
        }
    )
    assert pairs == [
        ("a[b]", "1"),
        ("ids[]", "1"),
        ("ids[]", "2"),
        ("flag", "true"),
        ("none", ""),
        ("objs[0][k]", "v"),
    ]


def test_build_query_string_form_encodes():
    assert build_query_string({"q": "two words", "ids": [1, 2]}) == "q=two+words&ids%5B%5D=1&ids%5B%5D=2"


def test_url_without_params():
    assert build_request_url(BASE, make_descriptor("taxa/47126")) == f"{BASE}/v1/taxa/47126"


def test_url_with_params():
    url = build_request_url(BASE, make_descriptor(params={"taxon_id": 3, "per_page": 10}))
    assert url == f"{BASE}/v1/observations?taxon_id=3&per_page=10"


def test_v2_fields_start_query_string():
    url = build_request_url(BASE, make_descriptor("users/me", api_version="v2", fields="login"))
    assert url == f"{BASE}/v2/users/me?fields=(login:!t)"


def test_v2_fields_join_existing_params():
    url = build_request_url(
        BASE,
        make_descriptor(api_version="v2", params={"taxon_id": 3}, fields={"id": 1, "user": {"login": 1}}),
    )
    assert url == f"{BASE}/v2/observations?taxon_id=3&fields=(id:!t,user:(login:!t))"


def test_fields_ignored_for_v1():
    url = build_request_url(BASE, make_descriptor(api_version="v1", fields="id"))
    assert url == f"{BASE}/v1/observations"


def test_empty_fields_ignored():
    assert build_request_url(BASE, make_descriptor(api_version="v2", fields="")) == f"{BASE}/v2/observations"


def test_unencodable_fields_raise():
    with pytest.raises(FieldsEncodingError):
        build_request_url(BASE, make_descriptor(api_version="v2", fields=[object()]))


def test_trailing_slash_in_base_url():
    assert build_request_url(BASE + "/", make_descriptor("/places/1")) == f"{BASE}/v1/places/1"
