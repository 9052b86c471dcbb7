from pydantic import BaseModel


def assert_asts_equal(actual, expected):
    """
    Recursively asserts that two AST nodes (pydantic models) are equal,
    ignoring the 'span' attribute. Provides detailed error messages for mismatches.
    """
    assert type(actual) == type(expected), f"AST node types differ. Actual: {type(actual).__name__}, Expected: {type(expected).__name__}"

    if isinstance(actual, BaseModel):
        for field_name in type(actual).model_fields:
            if field_name == "span":
                continue

            try:
                assert_asts_equal(getattr(actual, field_name), getattr(expected, field_name))
            except AssertionError as e:
                raise AssertionError(f"Mismatch in field '{field_name}' of {type(actual).__name__}:\n{e}") from e

    elif isinstance(actual, list):
        assert len(actual) == len(expected), f"List lengths differ. Actual: {len(actual)}, Expected: {len(expected)}"
        for i, (act, exp) in enumerate(zip(actual, expected)):
            try:
                assert_asts_equal(act, exp)
            except AssertionError as e:
                raise AssertionError(f"Mismatch at index [{i}] of a list:\n{e}") from e

    else:
        # Plain values (int, float, str, bool, None)
        assert actual == expected, f"Values differ. Actual: '{actual}', Expected: '{expected}'"
