"""Tests for FCC parsing, the FCC client and station-table maintenance."""

from __future__ import annotations

import asyncio
import json
import time

import httpx
import pytest
from click.testing import CliRunner

from sports_radio.cli import cli
from sports_radio.clients.fcc_client import FCCClient, FCCFetchError, RequestPacer
from sports_radio.maintenance import (
    FIX_FREQ_TOLERANCE,
    fetch_states,
    fix_unmatched,
    index_records,
    load_cache,
    lookup_call_sign,
    lookup_radio_locator,
    save_cache,
    update_stations,
)
from sports_radio.models import FCCRecord, Station
from sports_radio.parsers.base import leading_float
from sports_radio.parsers.fcc_text import FCCTextParser
from sports_radio.parsers.radio_locator_html import RadioLocatorHTMLParser


def _fcc_line(call="KFAB", freq="1110  kHz", service="AM", erp="", am_power="50.0   kW",
              city="OMAHA", state="NE",
              lat=("N", "41", "15", "23.00"), lon=("W", "95", "56", "4.00")):
    cols = [""] * 28
    cols[1] = call
    cols[2] = freq
    cols[3] = service
    cols[4] = erp
    cols[10] = city
    cols[11] = state
    cols[14] = am_power
    cols[19:23] = lat
    cols[23:27] = lon
    return "|".join(cols)


def _station(call="KFAB", fmt="AM", freq=1110, city="Omaha", lat=41.2565, lon=-95.9345, sport="Football"):
    return Station(call_sign=call, frequency=freq, format=fmt, city=city, sport=sport,
                   state="NE", latitude=lat, longitude=lon)


def _record(call="KFAB", fmt="AM", freq=1110, lat=41.2564, lon=-95.9344, power=50.0):
    return FCCRecord(call_sign=call, frequency=freq, format=fmt, city="OMAHA", state="NE",
                     power=power, latitude=lat, longitude=lon)


# ── Parser tests ─────────────────────────────────────────────────────────


class TestFCCTextParser:
    def test_parse_am(self):
        records = FCCTextParser().parse(_fcc_line() + "\n", "AM")
        assert len(records) == 1
        r = records[0]
        assert r.call_sign == "KFAB"
        assert r.frequency == 1110
        assert r.format == "AM"
        assert r.power == 50.0
        assert r.city == "OMAHA"
        assert r.state == "NE"
        assert r.latitude == pytest.approx(41 + 15 / 60 + 23 / 3600)
        assert r.longitude == pytest.approx(-(95 + 56 / 60 + 4 / 3600))

    def test_parse_fm_strips_suffix_and_uses_erp(self):
        line = _fcc_line(call="KBRB-FM", freq="92.7  MHz", service="FM", erp="100.  kW", am_power="")
        r = FCCTextParser().parse(line, "FM")[0]
        assert r.call_sign == "KBRB"
        assert r.frequency == 92.7
        assert r.power == 100.0

    def test_other_service_skipped(self):
        raw = "\n".join([_fcc_line(service="FM", call="KXXX"), _fcc_line()])
        records = FCCTextParser().parse(raw, "AM")
        assert [r.call_sign for r in records] == ["KFAB"]

    def test_short_and_junk_lines_skipped(self):
        raw = "\n".join([
            "<html>header</html>",
            "|KFAB|1110|AM|",
            _fcc_line(freq="n/a"),
            _fcc_line(call="KLIN", freq="1400  kHz"),
        ])
        assert [r.call_sign for r in FCCTextParser().parse(raw, "AM")] == ["KLIN"]

    def test_missing_coordinates_and_power(self):
        line = _fcc_line(am_power="0.0", lat=("", "", "", ""), lon=("", "", "", ""))
        r = FCCTextParser().parse(line, "AM")[0]
        assert r.power is None
        assert r.latitude is None and r.longitude is None
        assert not r.has_location

    def test_empty_input(self):
        assert FCCTextParser().parse("", "FM") == []

    def test_leading_float(self):
        assert leading_float("100.  kW") == 100.0
        assert leading_float(" 92.7 MHz") == 92.7
        assert leading_float("-") is None
        assert leading_float(None) is None


class TestRadioLocatorParser:
    PAGE = (
        "<html><body><h1>KFAB 1110 kHz</h1>"
        "<table><tr><td>Latitude: 41.1234</td></tr>"
        "<tr><td>Longitude: -96.0123</td></tr>"
        "<tr><td>Power: 50 kW</td></tr></table></body></html>"
    )

    def test_parse(self):
        records = RadioLocatorHTMLParser(call_sign="kfab").parse(self.PAGE, "AM")
        assert len(records) == 1
        r = records[0]
        assert r.call_sign == "KFAB"
        assert r.frequency == 1110
        assert r.latitude == 41.1234
        assert r.longitude == -96.0123
        assert r.power == 50.0

    def test_call_sign_from_page(self):
        r = RadioLocatorHTMLParser().parse(self.PAGE, "AM")[0]
        assert r.call_sign == "KFAB"

    def test_no_coordinates(self):
        assert RadioLocatorHTMLParser().parse("<html><p>No results</p></html>", "AM") == []


# ── Client tests ─────────────────────────────────────────────────────────


def _client(handler) -> FCCClient:
    return FCCClient(delay_seconds=0, transport=httpx.MockTransport(handler))


class TestFCCClient:
    def test_fetch_state_params(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text=_fcc_line())

        async def run():
            async with _client(handler) as client:
                return await client.fetch_state("AM", "NE")

        text = asyncio.run(run())
        assert "KFAB" in text
        assert seen[0].url.path == "/fcc-bin/amq"
        assert seen[0].url.params["state"] == "NE"
        assert seen[0].url.params["list"] == "4"
        assert seen[0].url.params["freq"] == "540"

    def test_fetch_call_sign_params(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="")

        async def run():
            async with _client(handler) as client:
                await client.fetch_call_sign("KBRB", "FM")

        asyncio.run(run())
        assert seen[0].url.path == "/fcc-bin/fmq"
        assert seen[0].url.params["call"] == "KBRB"

    def test_radio_locator_lowercases(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="<html></html>")

        async def run():
            async with _client(handler) as client:
                await client.fetch_radio_locator("KFAB", "NE")

        asyncio.run(run())
        assert seen[0].url.host == "radio-locator.com"
        assert seen[0].url.params["call"] == "kfab"
        assert seen[0].url.params["state"] == "ne"
        assert seen[0].url.params["service"] == "AM"

    def test_http_error_aborts(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="oops")

        async def run():
            async with _client(handler) as client:
                await client.fetch_state("FM", "NE")

        with pytest.raises(FCCFetchError):
            asyncio.run(run())

    def test_non_200_success_code_aborts(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        async def run():
            async with _client(handler) as client:
                await client.fetch_state("FM", "NE")

        with pytest.raises(FCCFetchError):
            asyncio.run(run())

    def test_network_error_aborts(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async def run():
            async with _client(handler) as client:
                await client.fetch_state("AM", "KS")

        with pytest.raises(FCCFetchError) as exc:
            asyncio.run(run())
        assert isinstance(exc.value.__cause__, httpx.ConnectError)

    def test_fetch_states_sequential(self):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append((request.url.path, request.url.params["state"]))
            if request.url.path.endswith("fmq"):
                return httpx.Response(200, text=_fcc_line(call="KBRB-FM", freq="92.7", service="FM", erp="50."))
            return httpx.Response(200, text=_fcc_line())

        async def run():
            async with _client(handler) as client:
                return await fetch_states(client, ["NE", "SD"])

        records = asyncio.run(run())
        assert paths == [
            ("/fcc-bin/fmq", "NE"), ("/fcc-bin/amq", "NE"),
            ("/fcc-bin/fmq", "SD"), ("/fcc-bin/amq", "SD"),
        ]
        assert [(r.call_sign, r.format) for r in records] == [
            ("KBRB", "FM"), ("KFAB", "AM"), ("KBRB", "FM"), ("KFAB", "AM"),
        ]

    def test_radio_locator_lookup_queries_requested_band(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text=TestRadioLocatorParser.PAGE)

        async def run():
            async with _client(handler) as client:
                return await lookup_radio_locator(client, "KBRB", "NE", "FM")

        record = asyncio.run(run())
        assert seen[0].url.params.get_list("service") == ["FM"]
        assert record.call_sign == "KBRB"
        assert record.format == "FM"

    def test_lookup_call_sign_filters_other_calls(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="\n".join([_fcc_line(call="KFABX"), _fcc_line(call="KFAB")]))

        async def run():
            async with _client(handler) as client:
                return await lookup_call_sign(client, "kfab", "AM")

        record = asyncio.run(run())
        assert record.call_sign == "KFAB"


class TestRequestPacer:
    def test_first_call_immediate_then_paced(self):
        pacer = RequestPacer(0.05)

        async def run():
            t0 = time.monotonic()
            await pacer.acquire()
            t1 = time.monotonic()
            await pacer.acquire()
            t2 = time.monotonic()
            return t1 - t0, t2 - t1

        first, second = asyncio.run(run())
        assert first < 0.05
        assert second >= 0.04


# ── Merge tests ──────────────────────────────────────────────────────────


class TestUpdateStations:
    def test_moves_to_tower(self):
        station = _station()
        tower = _record(lat=41.3, lon=-96.1, power=50.0)
        [updated], report = update_stations([station], [tower])
        assert (updated.latitude, updated.longitude) == (41.3, -96.1)
        assert (updated.tower_latitude, updated.tower_longitude) == (41.3, -96.1)
        assert (updated.city_latitude, updated.city_longitude) == (41.2565, -95.9345)
        assert updated.power == 50.0
        assert len(report.matched) == 1
        assert len(report.moved) == 1
        assert report.unmatched == []

    def test_tiny_move_not_counted(self):
        [updated], report = update_stations([_station()], [_record(lat=41.2566, lon=-95.9346)])
        assert len(report.matched) == 1
        assert report.moved == []
        assert updated.latitude == 41.2566

    def test_frequency_picks_between_facilities(self):
        station = _station(call="KLIN", fmt="FM", freq=99.3, city="Lincoln")
        records = [
            _record(call="KLIN", fmt="FM", freq=101.5, lat=40.0),
            _record(call="KLIN", fmt="FM", freq=99.3, lat=40.9),
        ]
        [updated], _ = update_stations([station], records)
        assert updated.latitude == 40.9

    def test_matches_on_format(self):
        station = _station(fmt="FM", freq=99.3)
        [updated], report = update_stations([station], [_record(fmt="AM")])
        assert updated is station
        assert len(report.unmatched) == 1

    def test_record_without_tower_keeps_coordinates(self):
        [updated], report = update_stations([_station()], [_record(lat=None, lon=None, power=5.0)])
        assert (updated.latitude, updated.longitude) == (41.2565, -95.9345)
        assert updated.tower_latitude is None
        assert updated.power == 5.0
        assert report.moved == []

    def test_summary(self):
        _, report = update_stations([_station(), _station(call="KNONE")], [_record(lat=42.0)])
        assert report.summary() == "Matched: 1 stations, updated coordinates: 1, not matched: 1"


class TestFixUnmatched:
    def test_translator_uses_am_tower(self):
        station = _station(call="KCOW", fmt="FM", freq=107.5, city="Alliance", lat=42.09302, lon=-102.8702)
        am = _record(call="KCOW", fmt="AM", freq=1400, lat=42.1, lon=-102.9, power=5.0)
        [fixed], report = fix_unmatched([station], [am])
        assert (fixed.latitude, fixed.longitude) == (42.1, -102.9)
        assert fixed.city_latitude == 42.09302
        assert fixed.power == 5.0
        assert fixed.power_source == "AM"
        assert fixed.translator_of == "KCOW"
        assert fixed.format == "FM"
        assert len(report.fixed) == 1

    def test_call_sign_correction(self):
        station = _station(call="KICS/KXPN", fmt="FM", freq=106.3, city="Hastings")
        records = [
            _record(call="KLIQ", fmt="FM", freq=94.5, lat=40.0),
            _record(call="KLIQ", fmt="FM", freq=106.3 + FIX_FREQ_TOLERANCE / 2, lat=40.6),
        ]
        [fixed], _ = fix_unmatched([station], records)
        assert fixed.call_sign == "KLIQ"
        assert fixed.latitude == 40.6

    def test_missing_parent_not_fixed(self):
        station = _station(call="KUVR", fmt="FM", freq=96.7, city="Holdrege")
        [result], report = fix_unmatched([station], [])
        assert result is station
        assert len(report.not_fixed) == 1

    def test_other_stations_untouched(self):
        station = _station()
        [result], report = fix_unmatched([station], [_record()])
        assert result is station
        assert report.fixed == [] and report.not_fixed == []


class TestCache:
    def test_save_and_load(self, tmp_path):
        path = tmp_path / "fcc-data-cache.json"
        save_cache(path, [_record(), _record(call="KBRB", fmt="FM", freq=92.7, lat=None, lon=None)])
        data = json.loads(path.read_text())
        assert data[0]["callSign"] == "KFAB"
        assert "rawLine" in data[0]
        records = load_cache(path)
        assert [r.call_sign for r in records] == ["KFAB", "KBRB"]
        assert records[1].latitude is None

    def test_index_records(self):
        index = index_records([_record(), _record(freq=1111), _record(fmt="FM")])
        assert len(index[("KFAB", "AM")]) == 2
        assert len(index[("KFAB", "FM")]) == 1


# ── CLI tests ────────────────────────────────────────────────────────────


class TestCLI:
    def test_nearest_html(self):
        result = CliRunner().invoke(cli, ["nearest", "--lat", "41.2565", "--lon", "-95.9345", "--html"])
        assert result.exit_code == 0, result.output
        assert "KFAB" in result.output
        assert "station-item nearest" in result.output

    def test_nearest_without_location_shows_fallback(self):
        result = CliRunner().invoke(cli, ["nearest", "--error", "permission-denied"])
        assert result.exit_code == 0, result.output
        assert "Unable to get your location" in result.output

    def test_nearest_not_requested_is_not_an_error(self):
        result = CliRunner().invoke(cli, ["nearest"])
        assert result.exit_code == 0, result.output
        assert "Showing all stations" in result.output
        assert "Unable" not in result.output

    def test_lat_without_lon(self):
        result = CliRunner().invoke(cli, ["nearest", "--lat", "41.0"])
        assert result.exit_code != 0

    def test_fcc_update_writes_review_copy(self, tmp_path):
        stations_path = tmp_path / "stations.json"
        stations_path.write_text(json.dumps([_station().to_dict()]))
        cache_path = tmp_path / "cache.json"
        save_cache(cache_path, [_record(lat=41.3, lon=-96.1)])

        result = CliRunner().invoke(
            cli, ["fcc-update", "--stations", str(stations_path), "--cache", str(cache_path)],
        )
        assert result.exit_code == 0, result.output
        out = json.loads((tmp_path / "stations-updated.json").read_text())
        assert out[0]["towerLatitude"] == 41.3
        assert out[0]["cityLatitude"] == 41.2565
        # original left alone for review
        assert "towerLatitude" not in json.loads(stations_path.read_text())[0]

    def test_fcc_fix_writes_review_copy(self, tmp_path):
        stations_path = tmp_path / "stations.json"
        stations_path.write_text(json.dumps([
            _station(call="KGFW", fmt="FM", freq=103.1, city="Kearney").to_dict(),
        ]))
        cache_path = tmp_path / "cache.json"
        save_cache(cache_path, [_record(call="KGFW", fmt="AM", freq=1340, lat=40.7, lon=-99.1)])

        result = CliRunner().invoke(
            cli, ["fcc-fix", "--stations", str(stations_path), "--cache", str(cache_path)],
        )
        assert result.exit_code == 0, result.output
        out = json.loads((tmp_path / "stations-fixed.json").read_text())
        assert out[0]["translatorOf"] == "KGFW"
        assert out[0]["powerSource"] == "AM"
