"""Tests for payload validation and pizza index aggregation."""

from __future__ import annotations

import json
import math

import pytest

from pizzint.collector.aggregator import calculate_index, parse_payload
from pizzint.core.exceptions import EmptyPayload, MalformedPayload


class TestCalculateIndex:
    def test_plain_mean(self):
        locations = [{"current_popularity": 40}, {"current_popularity": 60}]
        assert calculate_index(locations) == pytest.approx(50.0)

    def test_null_counts_as_zero(self):
        locations = [{"current_popularity": 90}, {"current_popularity": None}]
        assert calculate_index(locations) == pytest.approx(45.0)

    def test_missing_field_counts_as_zero(self):
        locations = [{"current_popularity": 30}, {"name": "Closed Pizzeria"}, {}]
        assert calculate_index(locations) == pytest.approx(10.0)

    def test_float_popularity(self):
        assert calculate_index([{"current_popularity": 12.5}]) == pytest.approx(12.5)

    def test_fixture_payload(self, load_fixture):
        locations = parse_payload(load_fixture("pizzint_sample.json"))
        # (40 + 60 + 0 + 80) / 4
        assert calculate_index(locations) == pytest.approx(45.0)

    def test_empty_raises_empty_payload(self):
        with pytest.raises(EmptyPayload):
            calculate_index([])

    def test_empty_payload_is_malformed(self):
        with pytest.raises(MalformedPayload):
            calculate_index([])

    @pytest.mark.parametrize("value", ["40", True, [40], {"v": 40}])
    def test_non_numeric_popularity_rejected(self, value):
        with pytest.raises(MalformedPayload):
            calculate_index([{"current_popularity": value}])

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, 10**400])
    def test_non_finite_popularity_rejected(self, value):
        with pytest.raises(MalformedPayload, match="non-finite"):
            calculate_index([{"current_popularity": 40}, {"current_popularity": value}])

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e999"])
    def test_non_finite_json_literals_rejected(self, literal):
        body = json.loads(
            '{"success": true, "data": [{"current_popularity": 40}, '
            f'{{"current_popularity": {literal}}}]}}'
        )
        with pytest.raises(MalformedPayload):
            calculate_index(parse_payload(body))

    def test_overflowing_sum_rejected(self):
        with pytest.raises(MalformedPayload, match="overflow"):
            calculate_index([{"current_popularity": 1e308}, {"current_popularity": 1e308}])

    def test_non_object_location_rejected(self):
        with pytest.raises(MalformedPayload, match="#1"):
            calculate_index([{"current_popularity": 10}, 42])

    @pytest.mark.parametrize("locations", ["abc", {"current_popularity": 10}, None])
    def test_non_sequence_rejected(self, locations):
        with pytest.raises(MalformedPayload):
            calculate_index(locations)


class TestParsePayload:
    def test_returns_data_list(self):
        data = [{"current_popularity": 1}]
        assert parse_payload({"success": True, "data": data}) is data

    def test_unsuccessful_response(self):
        with pytest.raises(MalformedPayload):
            parse_payload({"success": False, "data": [{"current_popularity": 1}]})

    def test_missing_success_flag(self):
        with pytest.raises(MalformedPayload):
            parse_payload({"data": []})

    def test_null_data(self):
        with pytest.raises(MalformedPayload):
            parse_payload({"success": True, "data": None})

    def test_data_not_a_list(self):
        with pytest.raises(MalformedPayload, match="list"):
            parse_payload({"success": True, "data": {"current_popularity": 5}})

    def test_body_not_an_object(self):
        with pytest.raises(MalformedPayload):
            parse_payload([{"current_popularity": 5}])

    def test_empty_data_passes_envelope_check(self):
        """An empty list is a valid envelope; aggregation rejects it later."""
        assert parse_payload({"success": True, "data": []}) == []
