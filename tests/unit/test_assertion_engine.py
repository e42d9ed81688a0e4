import pytest

from cadence.assertions import (
    AssertionEngine,
    AssertionFailure,
    AssertionStatus,
    ContentType,
    assert_on,
    assert_that,
    body_equals,
    body_has_size,
    content_type_is,
    header_equals,
    status_equals,
)
from tests.fixtures.responses import CIRCUITS_BODY, make_response

CIRCUIT_IDS = "MRData.CircuitTable.Circuits[*].circuitId"


@pytest.fixture
def engine():
    return AssertionEngine()


@pytest.fixture
def circuits():
    return make_response(body=CIRCUITS_BODY, headers={"X-Trace-Id": "abc123"})


class TestStatus:
    def test_equal_status_passes(self, engine):
        assert engine.status(make_response(status=200), 200).passed

    @pytest.mark.parametrize("actual", [199, 201, 404, 500])
    def test_other_status_fails(self, engine, actual):
        result = engine.status(make_response(status=actual), 200)

        assert result.status == AssertionStatus.FAILED
        assert result.expected == 200
        assert result.actual == actual

    def test_404_is_a_normal_response(self, engine):
        assert engine.status(make_response(status=404, body=b"", content_type=None), 404).passed


class TestHeader:
    @pytest.mark.parametrize("name", ["Content-Length", "content-length", "CONTENT-LENGTH"])
    def test_names_are_case_insensitive(self, engine, name):
        response = make_response(body=b"x" * 4551, content_type=None)
        assert engine.header(response, name, "4551").passed

    def test_absent_header_is_missing(self, engine, circuits):
        result = engine.header(circuits, "X-Request-Id", "1")

        assert result.status == AssertionStatus.MISSING
        assert result.missing
        assert result.failed
        assert "X-Trace-Id" in result.details["available"]

    def test_different_value_fails(self, engine, circuits):
        result = engine.header(circuits, "X-Trace-Id", "zzz")

        assert result.status == AssertionStatus.FAILED
        assert result.actual == "abc123"
        assert result.expected == "zzz"

    def test_integer_expectation_is_compared_as_text(self, engine):
        response = make_response(body=b"12345", content_type=None)
        assert engine.header(response, "Content-Length", 5).passed


class TestContentType:
    @pytest.mark.parametrize(
        "content_type",
        ["application/json", "application/json; charset=utf-8", "application/problem+json"],
    )
    def test_json_variants_match(self, engine, content_type):
        response = make_response(body={}, content_type=content_type)
        assert engine.content_type(response, ContentType.JSON).passed

    def test_other_media_type_fails(self, engine):
        response = make_response(body=b"<html/>", content_type="text/html")
        result = engine.content_type(response, ContentType.JSON)

        assert result.status == AssertionStatus.FAILED
        assert result.actual == "text/html"

    def test_explicit_media_type(self, engine):
        response = make_response(body={}, content_type="application/json; charset=utf-8")

        assert engine.content_type(response, "application/json").passed
        assert not engine.content_type(response, "text/json").passed

    def test_absent_content_type_is_missing(self, engine):
        response = make_response(body=b"raw", content_type=None)
        assert engine.content_type(response, ContentType.TEXT).missing


class TestBodyEquals:
    def test_scalar_value(self, engine, circuits):
        path = "MRData.CircuitTable.Circuits[1].Location.country"
        assert engine.body_equals(circuits, path, "USA").passed

    def test_strings_are_not_numbers(self, engine, circuits):
        path = "MRData.CircuitTable.Circuits[1].Location.lat"
        result = engine.body_equals(circuits, path, 30.1328)

        assert result.status == AssertionStatus.FAILED
        assert "Type mismatch" in result.details["hint"]

    def test_sequence_against_list(self, engine, circuits):
        expected = ["albert_park", "americas", "bahrain"]
        assert engine.body_equals(circuits, CIRCUIT_IDS, expected).passed
        assert not engine.body_equals(circuits, CIRCUIT_IDS, expected[::-1]).passed

    def test_sequence_against_scalar_checks_every_element(self, engine):
        response = make_response(body={"items": [{"ok": True}, {"ok": True}, {"ok": False}]})

        result = engine.body_equals(response, "items[*].ok", True)

        assert result.status == AssertionStatus.FAILED
        assert result.details["mismatched_indexes"] == [2]

    def test_empty_sequence_never_equals_a_scalar(self, engine):
        response = make_response(body={"items": []})
        assert not engine.body_equals(response, "items[*].ok", True).passed

    @pytest.mark.parametrize(
        "value, expected",
        [(True, 1), (False, 0), (1, True), (0, False), ([True], [1]), ({"a": False}, {"a": 0})],
    )
    def test_booleans_are_not_numbers(self, engine, value, expected):
        result = engine.body_equals(make_response(body={"flag": value}), "flag", expected)
        assert result.status == AssertionStatus.FAILED

    def test_booleans_are_not_numbers_in_sequences(self, engine):
        response = make_response(body={"items": [{"ok": 1}, {"ok": True}]})

        result = engine.body_equals(response, "items[*].ok", True)

        assert result.status == AssertionStatus.FAILED
        assert result.details["mismatched_indexes"] == [0]

    def test_true_is_not_one_through_assert_on(self):
        result = assert_on(make_response(body={"flag": True}), body_equals("flag", 1))

        assert result.status == AssertionStatus.FAILED
        assert "Type mismatch" in result.details["hint"]

    def test_int_equals_float(self, engine):
        assert engine.body_equals(make_response(body={"total": 20}), "total", 20.0).passed

    def test_null_value(self, engine):
        assert engine.body_equals(make_response(body={"name": None}), "name", None).passed
        assert not engine.body_equals(make_response(body={"name": 0}), "name", None).passed

    def test_index_into_string_is_missing(self, engine):
        result = engine.body_equals(make_response(body={"md5": "abc"}), "md5[1]", "b")
        assert result.status == AssertionStatus.MISSING

    def test_missing_path(self, engine, circuits):
        result = engine.body_equals(circuits, "MRData.nope", "x")

        assert result.status == AssertionStatus.MISSING
        assert result.expected == "x"

    def test_invalid_path_is_an_error(self, engine, circuits):
        result = engine.body_equals(circuits, "MRData[", "x")
        assert result.status == AssertionStatus.ERROR

    def test_non_json_body_is_an_error(self, engine):
        response = make_response(body=b"just some text", content_type="text/plain")
        result = engine.body_equals(response, "md5", "x")

        assert result.status == AssertionStatus.ERROR
        assert result.message == "Response body is not JSON"


class TestResultText:
    def test_expected_null_is_shown(self, engine):
        result = engine.body_equals(make_response(body={"name": "x"}), "name", None)
        text = str(result)

        assert "Expected: null" in text
        assert "Actual:   'x'" in text

    def test_actual_null_is_shown(self, engine):
        result = engine.body_equals(make_response(body={"name": None}), "name", "x")
        text = str(result)

        assert "Expected: 'x'" in text
        assert "Actual:   null" in text

    def test_missing_has_no_actual_line(self, engine):
        text = str(engine.body_equals(make_response(body={}), "name", None))

        assert "Expected: null" in text
        assert "Actual:" not in text

    def test_error_serializes_without_values(self, engine):
        data = engine.body_equals(make_response(body={}), "name[", "x").to_dict()
        assert (data["expected"], data["actual"]) == (None, None)


class TestBodySize:
    def test_exact_size_passes(self, engine, circuits):
        assert engine.body_size(circuits, CIRCUIT_IDS, 3).passed

    @pytest.mark.parametrize("size", [2, 4])
    def test_off_by_one_fails(self, engine, circuits, size):
        result = engine.body_size(circuits, CIRCUIT_IDS, size)

        assert result.status == AssertionStatus.FAILED
        assert result.actual == "size 3"

    def test_size_of_object_and_string(self, engine, circuits):
        assert engine.body_size(circuits, "MRData.CircuitTable.Circuits[0].Location", 3).passed
        assert engine.body_size(circuits, "MRData.CircuitTable.season", 4).passed

    def test_size_of_number_is_an_error(self, engine):
        response = make_response(body={"total": 20})
        assert engine.body_size(response, "total", 20).status == AssertionStatus.ERROR

    def test_empty_array(self, engine):
        response = make_response(body={"items": []})
        assert engine.body_size(response, "items[*].id", 0).passed


class TestAssertThat:
    def test_returns_results_when_all_pass(self, circuits):
        results = assert_that(
            circuits,
            status_equals(200),
            content_type_is(ContentType.JSON),
            body_has_size(CIRCUIT_IDS, 3),
        )
        assert [r.status for r in results] == [AssertionStatus.PASSED] * 3

    def test_raises_with_every_failure(self, circuits):
        with pytest.raises(AssertionFailure) as exc_info:
            assert_that(
                circuits,
                status_equals(200),
                header_equals("X-Trace-Id", "zzz"),
                body_equals("MRData.nope", 1),
            )

        failure = exc_info.value
        assert isinstance(failure, AssertionError)
        assert len(failure.results) == 3
        message = str(failure)
        assert message.startswith("2 of 3 assertion(s) did not pass:")
        assert "Selector: header 'X-Trace-Id'" in message
        assert "MISSING: Path does not exist" in message

    def test_assert_on_does_not_raise(self, circuits):
        result = assert_on(circuits, status_equals(500))
        assert result.status == AssertionStatus.FAILED


def test_result_text_names_expected_and_actual(engine):
    response = make_response(body={"md5": "abc"})
    text = str(engine.body_equals(response, "md5", "def"))

    assert "FAILED: Value does not match" in text
    assert "Selector: body 'md5'" in text
    assert "Expected: 'def'" in text
    assert "Actual:   'abc'" in text
