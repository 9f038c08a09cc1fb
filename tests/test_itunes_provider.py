"""Tests for the iTunes metadata provider"""
import asyncio
import time
from unittest.mock import Mock, patch

import pytest
import requests

from providers.itunes import ItunesMetadataProvider, enhance_artwork_url


def _response(payload=None, status=200, json_error=None):
    response = Mock()
    response.status_code = status
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Server Error")
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def _provider():
    return ItunesMetadataProvider(timeout=5, artwork_size=600)


async def test_first_result_is_used():
    provider = _provider()
    payload = {
        "resultCount": 2,
        "results": [
            {"trackName": "Song", "artistName": "Artist", "collectionName": "Album",
             "artworkUrl100": "https://is1.mzstatic.com/image/100x100bb.jpg"},
            {"trackName": "Other", "artistName": "Someone"},
        ],
    }
    with patch.object(provider.session, "get", return_value=_response(payload)) as get:
        result = await provider.search("Artist - Song")

    assert result.success
    assert result.track_name == "Song"
    assert result.artist_name == "Artist"
    assert result.album_name == "Album"
    assert result.artwork_url == "https://is1.mzstatic.com/image/600x600bb.jpg"
    assert result.error_message is None

    get.assert_called_once()
    params = get.call_args.kwargs["params"]
    assert params["term"] == "Artist - Song"
    assert params["limit"] == 1
    assert params["media"] == "music"
    assert params["entity"] == "song"


async def test_zero_results():
    provider = _provider()
    with patch.object(provider.session, "get", return_value=_response({"resultCount": 0, "results": []})):
        result = await provider.search("nothing")

    assert not result.success
    assert result.error_message == "No results"
    assert result.track_name is None


async def test_network_error_becomes_failure():
    provider = _provider()
    with patch.object(provider.session, "get", side_effect=requests.ConnectionError("connection refused")):
        result = await provider.search("Artist Song")

    assert not result.success
    assert "connection refused" in result.error_message


async def test_http_error_becomes_failure():
    provider = _provider()
    with patch.object(provider.session, "get", return_value=_response(status=503)):
        result = await provider.search("Artist Song")

    assert not result.success
    assert "503" in result.error_message


async def test_malformed_payload_becomes_failure():
    provider = _provider()
    with patch.object(provider.session, "get", return_value=_response(json_error=ValueError("Expecting value"))):
        result = await provider.search("Artist Song")
    assert not result.success

    with patch.object(provider.session, "get", return_value=_response(["not", "an", "object"])):
        result = await provider.search("Artist Song")
    assert not result.success
    assert result.error_message == "Malformed response"


async def test_empty_query_makes_no_request():
    provider = _provider()
    with patch.object(provider.session, "get") as get:
        result = await provider.search("   ")

    assert not result.success
    get.assert_not_called()


async def test_cancellation_propagates_promptly():
    provider = _provider()

    def slow_get(*args, **kwargs):
        # Runs in the worker thread and outlives the cancelled await
        time.sleep(0.3)
        return _response({"results": []})

    with patch.object(provider.session, "get", side_effect=slow_get):
        task = asyncio.create_task(provider.search("slow"))
        await asyncio.sleep(0.05)
        loop = asyncio.get_running_loop()
        started = loop.time()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert loop.time() - started < 0.2

    assert task.cancelled()


def test_enhance_artwork_url():
    assert enhance_artwork_url("https://x/100x100bb.jpg", 600) == "https://x/600x600bb.jpg"
    assert enhance_artwork_url("https://x/100x100.jpg", 1000) == "https://x/1000x1000.jpg"
    assert enhance_artwork_url("https://x/100x100bb.jpg", 100) == "https://x/100x100bb.jpg"
    assert enhance_artwork_url(None, 600) is None
