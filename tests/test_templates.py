import pytest

from app.constants import MESSAGES, get_template


def test_personalised_templates_include_name():
    assert "Alice" in get_template("name_received", "Alice")
    assert "Alice" in get_template("completed", "Alice")


def test_braces_in_names_are_not_interpreted():
    assert "{x}" in get_template("completed", "{x}")


def test_static_templates():
    for key in ("greeting", "need_text", "feedback_received", "need_image", "system_error"):
        assert get_template(key) == MESSAGES[key]


def test_unknown_template():
    with pytest.raises(KeyError):
        get_template("farewell")


def test_missing_argument():
    with pytest.raises(ValueError):
        get_template("completed")
