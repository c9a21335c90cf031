from food.exceptions import ConflictError, NotFoundError, first_error_message


def test_first_error_message_flattens_field_errors():
    assert first_error_message({"title": ["This field is required."]}) == "title: This field is required."
    assert first_error_message({"non_field_errors": ["Bad combo"]}) == "Bad combo"
    assert first_error_message({"detail": "Not found."}) == "Not found."
    assert first_error_message(["first", "second"]) == "first"
    assert first_error_message({}) == "Invalid input"


def test_error_defaults():
    assert NotFoundError().status_code == 404
    assert NotFoundError().message == "Resource not found"
    assert ConflictError("taken").status_code == 400
    assert str(ConflictError("taken")) == "taken"
