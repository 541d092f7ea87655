from __future__ import annotations

import base64

import pytest

from form_collector.errors import EncodingFailure
from form_collector.form_state import (
    FormState,
    ProfileImage,
    change_field,
    default_form_state,
    select_profile,
    set_agree,
    set_hobbies,
    toggle_hobby,
)


def test_default_state_is_blank():
    state = default_form_state()
    assert state == FormState()
    assert state.hobbies == []
    assert state.profile is None
    assert state.is_default()


def test_change_field_replaces_scalar_without_touching_others():
    state = change_field(FormState(email="a@b.co"), "name", "Ana")
    assert state.name == "Ana"
    assert state.email == "a@b.co"


def test_change_field_accepts_invalid_values():
    assert change_field(FormState(), "age", "not a number").age == "not a number"


def test_change_field_none_becomes_empty():
    assert change_field(FormState(gender="male"), "gender", None).gender == ""


def test_change_field_rejects_unknown_field():
    with pytest.raises(ValueError):
        change_field(FormState(), "hobbies", "music")


def test_set_agree():
    assert set_agree(FormState(), True).agree is True
    assert set_agree(FormState(agree=True), False).agree is False


def test_checking_hobby_twice_keeps_one_entry():
    state = toggle_hobby(FormState(), "coding", True)
    again = toggle_hobby(state, "coding", True)
    assert again.hobbies == ["coding"]
    assert again == state


def test_uncheck_removes_and_missing_uncheck_is_noop():
    state = toggle_hobby(toggle_hobby(FormState(), "music", True), "reading", True)
    state = toggle_hobby(state, "music", False)
    assert state.hobbies == ["reading"]
    assert toggle_hobby(state, "sports", False).hobbies == ["reading"]


def test_unknown_hobby_ignored():
    assert toggle_hobby(FormState(), "knitting", True).hobbies == []


def test_toggle_does_not_mutate_previous_state():
    before = FormState()
    toggle_hobby(before, "coding", True)
    assert before.hobbies == []


def test_set_hobbies_applies_checklist_value():
    state = set_hobbies(FormState(hobbies=["coding", "music"]), ["music", "sports", "sports"])
    assert state.hobbies == ["music", "sports"]
    assert set_hobbies(state, None).hobbies == []


def test_select_profile_replaces_and_clears():
    image = ProfileImage.from_bytes(b"abc", "me.png")
    state = select_profile(FormState(), image)
    assert state.profile is image
    assert select_profile(state, None).profile is None


def test_profile_from_data_url():
    payload = base64.b64encode(b"pixels").decode("ascii")
    image = ProfileImage.from_data_url(f"data:image/jpeg;base64,{payload}", "cat.jpg")
    assert image.read() == b"pixels"
    assert image.content_type == "image/jpeg"
    assert image.filename == "cat.jpg"


def test_profile_from_data_url_rejects_other_strings():
    with pytest.raises(ValueError):
        ProfileImage.from_data_url("not a data url", "x.png")


def test_profile_type_guessed_from_filename():
    assert ProfileImage.from_bytes(b"", "me.png").content_type == "image/png"


def test_profile_from_path_reads_lazily(tmp_path):
    path = tmp_path / "face.png"
    path.write_bytes(b"data")
    image = ProfileImage.from_path(path)
    assert image.read() == b"data"
    path.unlink()
    with pytest.raises(EncodingFailure):
        image.read()
