"""
The Ergast and md5 checks run against the local fake services.
"""

import pytest

from cadence import (
    AssertionFailure,
    ContentType,
    RequestSpec,
    body_equals,
    body_has_size,
    content_type_is,
    expect,
    extract,
    extract_from,
    header_equals,
    run,
    status_equals,
)
from tests.fixtures.fake_api import CIRCUITS_2017, circuits_payload

CIRCUIT_IDS = "MRData.CircuitTable.Circuits[*].circuitId"


@pytest.fixture
def circuits_url(fake_api):
    return f"{fake_api}/api/f1/{{season}}/circuits.json"


class TestCircuits:
    def test_number_of_circuits_in_2017(self, fake_api):
        expect(
            RequestSpec(url=f"{fake_api}/api/f1/2017/circuits.json"),
            body_has_size(CIRCUIT_IDS, 20),
        )

    @pytest.mark.parametrize("size", [19, 21])
    def test_wrong_count_fails(self, fake_api, size):
        with pytest.raises(AssertionFailure):
            expect(
                RequestSpec(url=f"{fake_api}/api/f1/2017/circuits.json"),
                body_has_size(CIRCUIT_IDS, size),
            )

    def test_response_headers(self, fake_api):
        expect(
            RequestSpec(url=f"{fake_api}/api/f1/2017/circuits.json"),
            status_equals(200),
            content_type_is(ContentType.JSON),
            header_equals("Content-Length", str(len(circuits_payload()))),
        )

    def test_season_as_path_param(self, circuits_url):
        expect(
            RequestSpec(url=circuits_url, path_params={"season": "2017"}),
            body_has_size(CIRCUIT_IDS, 20),
        )

    def test_other_season_has_no_circuits(self, circuits_url):
        expect(
            RequestSpec(url=circuits_url, path_params={"season": "1949"}),
            status_equals(200),
            body_has_size(CIRCUIT_IDS, 0),
        )

    def test_mismatched_param_is_404(self, fake_api):
        expect(
            RequestSpec(
                url=f"{fake_api}/api/{{badParam}}/{{season}}/circuits.json",
                path_params={"season": "2017", "badParam": "f2"},
            ),
            status_equals(404),
        )

    def test_circuit_location_from_extracted_id(self, circuits_url, fake_api):
        circuit_id = extract_from(
            RequestSpec(url=circuits_url, path_params={"season": "2017"}),
            "MRData.CircuitTable.Circuits[1].circuitId",
        )
        assert circuit_id == "americas"

        expect(
            RequestSpec(
                url=f"{fake_api}/api/f1/circuits/{{circuitId}}.json",
                path_params={"circuitId": circuit_id},
            ),
            body_equals("MRData.CircuitTable.Circuits[0].Location.country", "USA"),
            body_equals("MRData.CircuitTable.Circuits[0].Location.lat", "30.1328"),
            body_equals("MRData.CircuitTable.Circuits[0].Location.long", "-97.6411"),
        )

    @pytest.mark.parametrize("index", [0, 7, 19])
    def test_extracted_id_round_trips(self, fake_api, circuits_url, index):
        response = run(RequestSpec(url=circuits_url, path_params={"season": "2017"}))
        circuit_id = extract(response, f"MRData.CircuitTable.Circuits[{index}].circuitId")

        assert circuit_id == CIRCUITS_2017[index][0]
        expect(
            RequestSpec(
                url=f"{fake_api}/api/f1/circuits/{{circuitId}}.json",
                path_params={"circuitId": circuit_id},
            ),
            body_equals("MRData.CircuitTable.Circuits[0].circuitId", circuit_id),
        )


class TestMd5:
    def test_md5_checksum(self, fake_api):
        expect(
            RequestSpec(url=f"{fake_api}/md5", query_params={"text": "oohrah"}),
            body_equals("md5", "4d69131dd7eaed4aedbafd4333c1ccf1"),
        )

    def test_wrong_checksum_reports_actual(self, fake_api):
        with pytest.raises(AssertionFailure) as exc_info:
            expect(
                RequestSpec(url=f"{fake_api}/md5", query_params={"text": "oohrah"}),
                body_equals("md5", "0" * 32),
            )

        result = exc_info.value.results[0]
        assert result.actual == "4d69131dd7eaed4aedbafd4333c1ccf1"
